import asyncio
import logging
from dataclasses import dataclass

from app.application.interfaces.event_broker import EventBroker
from app.domain.entities.domain_event import DomainEvent
from app.infrastructure.circuit_breaker import CircuitBreaker
from app.infrastructure.resilience import ResilienceWrapper

logger = logging.getLogger(__name__)


@dataclass
class EmitterStats:
    published: int = 0
    failed: int = 0
    dropped: int = 0


class EventEmitter:
    """
    Fire-and-forget publisher of domain events.

    publish() schedules delivery on its own task and returns at once, so a
    cancelled request never cancels a notification for a committed mutation.
    Failures are logged and counted; there is no retry and no rollback.
    """

    def __init__(self, broker: EventBroker, resilience: ResilienceWrapper) -> None:
        self._broker = broker
        self._resilience = resilience
        self._pending: set[asyncio.Task] = set()
        self.stats = EmitterStats()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._resilience.breaker

    @property
    def pending(self) -> int:
        return len(self._pending)

    def publish(self, event: DomainEvent) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(
            self._deliver(event), name=f"publish-{event.event_id}"
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(lambda done: self._on_complete(event, done))
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight deliveries (used on shutdown)."""
        if not self._pending:
            return
        _, still_pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if still_pending:
            logger.warning("Event deliveries still pending after drain", extra={"pending": len(still_pending)})

    async def _deliver(self, event: DomainEvent) -> int | None:
        return await self._resilience.guard(
            self._broker.send, event.partition_key, event.to_message()
        )

    def _on_complete(self, event: DomainEvent, task: asyncio.Task) -> None:
        extra = {
            "event_id": str(event.event_id),
            "event_type": event.event_type.value,
            "entity_id": event.entity_id,
        }
        if task.cancelled():
            self.stats.failed += 1
            logger.error("Event publish cancelled", extra=extra)
            return
        exc = task.exception()
        if exc is not None:
            self.stats.failed += 1
            logger.error("Failed to publish event", exc_info=exc, extra=extra)
            return
        offset = task.result()
        if offset is None:
            self.stats.dropped += 1
            logger.warning("Event dropped, broker circuit open", extra=extra)
            return
        self.stats.published += 1
        logger.info("Published event", extra={**extra, "offset": offset})
