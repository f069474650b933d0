from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.result_cache import ResultCache, build_cache_key
from app.domain.entities.idempotency_record import IdempotencyRecord
from app.domain.entities.mutation import MutationResult
from app.domain.errors import IdempotencyReplayError


class InMemoryResultCache(ResultCache):
    """Process-local cache; expired records are evicted lazily on read."""

    def __init__(self, namespace: str = "catalog", clock: Clock | None = None) -> None:
        self._namespace = namespace
        self._clock = clock or SystemClock()
        self._records: dict[str, IdempotencyRecord] = {}
        self.hits = 0
        self.misses = 0

    async def get(self, idem_key: str) -> tuple[MutationResult | None, bool]:
        cache_key = build_cache_key(self._namespace, idem_key)
        record = self._records.get(cache_key)
        if record is not None and record.is_expired(self._clock.now()):
            del self._records[cache_key]
            record = None
        if record is None:
            self.misses += 1
            return None, False

        self.hits += 1
        try:
            return MutationResult.from_bytes(record.result_payload), True
        except (ValueError, KeyError, TypeError) as exc:
            raise IdempotencyReplayError(idem_key, str(exc)) from exc

    async def put(self, idem_key: str, result: MutationResult, ttl_seconds: int) -> None:
        cache_key = build_cache_key(self._namespace, idem_key)
        self._records[cache_key] = IdempotencyRecord.create(
            key=cache_key,
            result_payload=result.to_bytes(),
            now=self._clock.now(),
            ttl_seconds=ttl_seconds,
        )

    async def delete(self, idem_key: str) -> bool:
        return self._records.pop(build_cache_key(self._namespace, idem_key), None) is not None

    def record_for(self, idem_key: str) -> IdempotencyRecord | None:
        return self._records.get(build_cache_key(self._namespace, idem_key))
