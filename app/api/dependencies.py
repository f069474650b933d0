import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.event_broker import EventBroker
from app.application.interfaces.result_cache import ResultCache
from app.application.services.event_emitter import EventEmitter
from app.application.services.mutation_executor import MutationExecutor
from app.application.use_cases.idempotent_mutation import IdempotentMutationCoordinator
from app.application.use_cases.invalidate_idempotency_key import InvalidateIdempotencyKeyUseCase
from app.config import Settings
from app.domain.errors import ConflictError, InvalidRequestError, NotFoundError
from app.infrastructure.cache.redis_result_cache import RedisResultCache
from app.infrastructure.circuit_breaker import CircuitBreaker
from app.infrastructure.db.engine import build_engine, build_sessionmaker
from app.infrastructure.db.repositories.catalog_repo_sql import CatalogRepoSQL
from app.infrastructure.db.tables import metadata
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.in_memory.catalog_repo import InMemoryCatalogRepo
from app.infrastructure.in_memory.event_broker import InMemoryEventBroker
from app.infrastructure.in_memory.result_cache import InMemoryResultCache
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from app.infrastructure.messaging.kafka_event_broker import KafkaEventBroker
from app.infrastructure.resilience import ResilienceWrapper, fail_fast, log_and_drop
from app.infrastructure.services.key_lock import KeyedLock

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Process-wide collaborators; breakers and caches are shared by all requests."""

    settings: Settings
    clock: Clock
    result_cache: ResultCache
    event_broker: EventBroker
    event_emitter: EventEmitter
    persistence_resilience: ResilienceWrapper
    key_lock: KeyedLock
    catalog_repo: InMemoryCatalogRepo | None = None
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def breakers(self) -> list[CircuitBreaker]:
        return [self.persistence_resilience.breaker, self.event_emitter.breaker]

    async def startup(self) -> None:
        if self.engine is not None:
            # Dev/demo convenience; production schemas are managed outside the service
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        try:
            await self.event_broker.start()
        except Exception as exc:
            logger.error("Event broker unavailable at startup, events will fail until it recovers", exc_info=exc)

    async def shutdown(self) -> None:
        await self.event_emitter.drain(timeout=self.settings.shutdown_drain_timeout_seconds)
        await self.event_broker.stop()
        if isinstance(self.result_cache, RedisResultCache):
            await self.result_cache.close()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(settings: Settings, clock: Clock | None = None) -> ServiceContainer:
    clock = clock or SystemClock()

    if settings.redis_url:
        result_cache: ResultCache = RedisResultCache.from_url(
            settings.redis_url, namespace=settings.idempotency_namespace
        )
    else:
        result_cache = InMemoryResultCache(namespace=settings.idempotency_namespace, clock=clock)

    if settings.kafka_bootstrap_servers:
        event_broker: EventBroker = KafkaEventBroker(
            bootstrap_servers=settings.kafka_bootstrap_servers,
            topic=settings.kafka_topic_catalog_events,
        )
    else:
        event_broker = InMemoryEventBroker()

    persistence_breaker = CircuitBreaker(
        name="persistence",
        fail_max=settings.persistence_breaker_fail_max,
        reset_timeout=settings.persistence_breaker_reset_timeout,
        window_seconds=settings.persistence_breaker_window_seconds,
        clock=clock,
    )
    events_breaker = CircuitBreaker(
        name="event_broker",
        fail_max=settings.events_breaker_fail_max,
        reset_timeout=settings.events_breaker_reset_timeout,
        window_seconds=settings.events_breaker_window_seconds,
        clock=clock,
    )

    container = ServiceContainer(
        settings=settings,
        clock=clock,
        result_cache=result_cache,
        event_broker=event_broker,
        event_emitter=EventEmitter(
            broker=event_broker,
            resilience=ResilienceWrapper(events_breaker, fallback=log_and_drop),
        ),
        persistence_resilience=ResilienceWrapper(
            persistence_breaker,
            fallback=fail_fast,
            exclude=(ConflictError, InvalidRequestError, NotFoundError),
        ),
        key_lock=KeyedLock(),
    )
    if settings.use_in_memory:
        container.catalog_repo = InMemoryCatalogRepo()
    else:
        container.engine = build_engine(settings)
        container.session_factory = build_sessionmaker(container.engine)
    return container


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_session(
    container: ServiceContainer = Depends(get_container),
) -> AsyncIterator[AsyncSession | None]:
    if container.session_factory is None:
        yield None
        return
    async with container.session_factory() as session:
        yield session


def get_coordinator(
    container: ServiceContainer = Depends(get_container),
    session: AsyncSession | None = Depends(get_session),
) -> IdempotentMutationCoordinator:
    if container.catalog_repo is not None:
        executor = MutationExecutor(
            catalog_repo=container.catalog_repo,
            transaction_manager=NoopTransactionManager(),
            timeout_seconds=container.settings.persistence_timeout_seconds,
        )
    else:
        if session is None:
            raise RuntimeError("DB session not available")
        executor = MutationExecutor(
            catalog_repo=CatalogRepoSQL(session),
            transaction_manager=SQLAlchemyTransactionManager(session),
            timeout_seconds=container.settings.persistence_timeout_seconds,
        )

    return IdempotentMutationCoordinator(
        result_cache=container.result_cache,
        executor=executor,
        executor_resilience=container.persistence_resilience,
        event_emitter=container.event_emitter,
        clock=container.clock,
        key_lock=container.key_lock,
        ttl_seconds=container.settings.idempotency_ttl_seconds,
        cache_conflicts=container.settings.idempotency_cache_conflicts,
    )


def get_invalidate_use_case(
    container: ServiceContainer = Depends(get_container),
) -> InvalidateIdempotencyKeyUseCase:
    return InvalidateIdempotencyKeyUseCase(result_cache=container.result_cache)
