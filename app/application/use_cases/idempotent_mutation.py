import logging

from app.application.interfaces.clock import Clock
from app.application.interfaces.result_cache import ResultCache
from app.application.services.event_emitter import EventEmitter
from app.application.services.mutation_executor import MutationExecutor
from app.domain.entities.domain_event import DomainEvent
from app.domain.entities.mutation import ErrorKind, MutationRequest, MutationResult
from app.domain.errors import (
    ConflictError,
    IdempotencyReplayError,
    InvalidRequestError,
    NotFoundError,
    ServiceUnavailableError,
    TransientError,
)
from app.infrastructure.resilience import ResilienceWrapper
from app.infrastructure.services.key_lock import KeyedLock

logger = logging.getLogger(__name__)


class IdempotentMutationCoordinator:
    """
    Entry point for catalog mutations.

    1. With an idempotency key, a cached result is replayed as-is.
    2. Otherwise the executor runs behind the persistence circuit breaker.
    3. Successful results are cached under the key for the TTL.
    4. A domain event is handed to the emitter; its outcome never changes
       the response.
    """

    def __init__(
        self,
        result_cache: ResultCache,
        executor: MutationExecutor,
        executor_resilience: ResilienceWrapper,
        event_emitter: EventEmitter,
        clock: Clock,
        key_lock: KeyedLock,
        ttl_seconds: int = 3600,
        cache_conflicts: bool = False,
    ) -> None:
        self._result_cache = result_cache
        self._executor = executor
        self._executor_resilience = executor_resilience
        self._event_emitter = event_emitter
        self._clock = clock
        self._key_lock = key_lock
        self._ttl_seconds = ttl_seconds
        self._cache_conflicts = cache_conflicts

    async def execute(self, request: MutationRequest) -> MutationResult:
        idem_key = request.idempotency_key
        if not idem_key:
            return await self._run(request)

        async with self._key_lock.hold(idem_key):
            cached = await self._lookup(idem_key)
            if cached is not None:
                logger.info("Returning cached result for idempotency key", extra={"idem_key": idem_key})
                return cached
            return await self._run(request)

    async def _lookup(self, idem_key: str) -> MutationResult | None:
        try:
            result, found = await self._result_cache.get(idem_key)
        except IdempotencyReplayError as exc:
            logger.warning(
                "Cached result unreadable, re-executing",
                extra={"idem_key": idem_key, "reason": exc.reason},
            )
            return None
        return result if found else None

    async def _run(self, request: MutationRequest) -> MutationResult:
        idem_key = request.idempotency_key
        try:
            result = await self._executor_resilience.guard(self._executor.execute, request)
        except (ConflictError, InvalidRequestError, NotFoundError) as exc:
            logger.info(
                "Mutation rejected",
                extra={"idem_key": idem_key, "code": exc.code, "detail": exc.message},
            )
            result = MutationResult.failed(exc)
            if idem_key and self._cache_conflicts and result.error_kind is ErrorKind.CONFLICT:
                await self._result_cache.put(idem_key, result, self._ttl_seconds)
            return result
        except (TransientError, ServiceUnavailableError) as exc:
            logger.warning(
                "Mutation failed on a dependency",
                extra={"idem_key": idem_key, "code": exc.code, "detail": exc.message},
            )
            return MutationResult.failed(exc)

        if idem_key:
            await self._result_cache.put(idem_key, result, self._ttl_seconds)

        event = DomainEvent.from_result(request.operation_type, result, self._clock.now())
        try:
            self._event_emitter.publish(event)
        except Exception:
            logger.exception("Could not schedule event publish", extra={"entity_id": event.entity_id})
        return result
