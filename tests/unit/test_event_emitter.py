"""
Unit tests de EventEmitter: publicación fire-and-forget detrás del breaker.
"""

import asyncio
import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.application.interfaces.clock import FakeClock
from app.application.services.event_emitter import EventEmitter
from app.domain.entities.catalog_item import CatalogItem
from app.domain.entities.domain_event import DomainEvent, EventType
from app.domain.entities.mutation import MutationResult, OperationType
from app.infrastructure.circuit_breaker import BreakerState, CircuitBreaker
from app.infrastructure.in_memory.event_broker import InMemoryEventBroker
from app.infrastructure.resilience import ResilienceWrapper, log_and_drop

from tests.doubles import FailingEventBroker


def _event(item_id: int = 42, operation: OperationType = OperationType.CREATE) -> DomainEvent:
    item = CatalogItem(
        id=item_id,
        title="Pedro Páramo",
        author="Juan Rulfo",
        isbn="978-8437604183",
        price=Decimal("12.00"),
        stock_quantity=5,
        category="Novela",
    )
    return DomainEvent.from_result(
        operation, MutationResult.succeeded(item), datetime(2026, 1, 1, tzinfo=timezone.utc)
    )


def _emitter(broker, fail_max: int = 5) -> EventEmitter:
    breaker = CircuitBreaker("event_broker", fail_max=fail_max, reset_timeout=60, clock=FakeClock())
    return EventEmitter(broker, ResilienceWrapper(breaker, fallback=log_and_drop))


class TestDomainEventMessage:
    """Formato del mensaje publicado"""

    def test_message_shape(self):
        event = _event()

        message = json.loads(event.to_message())

        assert message["eventId"] == str(event.event_id)
        assert message["eventType"] == "ITEM_CREATED"
        assert message["entityId"] == 42
        assert message["payload"]["isbn"] == "978-8437604183"
        assert message["payload"]["price"] == "12.00"
        assert message["timestamp"] == "2026-01-01T00:00:00+00:00"
        assert event.partition_key == "42"

    def test_update_maps_to_item_updated(self):
        assert _event(operation=OperationType.UPDATE).event_type is EventType.ITEM_UPDATED

    def test_failed_result_has_no_event(self):
        with pytest.raises(ValueError):
            DomainEvent.from_result(
                OperationType.CREATE,
                MutationResult(success=False),
                datetime(2026, 1, 1, tzinfo=timezone.utc),
            )


class TestEventEmitter:
    """Entrega desacoplada del llamador"""

    @pytest.mark.asyncio
    async def test_publish_delivers_keyed_by_entity(self):
        broker = InMemoryEventBroker()
        emitter = _emitter(broker)

        task = emitter.publish(_event(42))
        offset = await task

        assert offset == 0
        [message] = broker.messages_for("42")
        assert json.loads(message.value)["entityId"] == 42
        assert emitter.stats.published == 1

    @pytest.mark.asyncio
    async def test_events_for_same_entity_share_partition(self):
        broker = InMemoryEventBroker(partitions=4)
        emitter = _emitter(broker)

        await emitter.publish(_event(7))
        await emitter.publish(_event(7, OperationType.UPDATE))

        messages = broker.messages_for("7")
        assert [m.offset for m in messages] == [0, 1]
        assert len({m.partition for m in messages}) == 1

    @pytest.mark.asyncio
    async def test_publish_returns_before_delivery(self):
        release = asyncio.Event()

        class SlowBroker(InMemoryEventBroker):
            async def send(self, key, value):
                await release.wait()
                return await super().send(key, value)

        emitter = _emitter(SlowBroker())

        task = emitter.publish(_event())

        assert not task.done()
        assert emitter.pending == 1
        release.set()
        await emitter.drain(timeout=1)
        assert emitter.pending == 0
        assert emitter.stats.published == 1

    @pytest.mark.asyncio
    async def test_broker_failure_is_counted_not_raised(self):
        broker = FailingEventBroker()
        emitter = _emitter(broker)

        emitter.publish(_event())
        await emitter.drain(timeout=1)

        assert broker.calls == 1
        assert emitter.stats.failed == 1
        assert emitter.breaker.snapshot().failure_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_drops_events(self):
        broker = FailingEventBroker()
        emitter = _emitter(broker, fail_max=2)

        for _ in range(4):
            emitter.publish(_event())
            await emitter.drain(timeout=1)

        assert emitter.breaker.state is BreakerState.OPEN
        assert broker.calls == 2
        assert emitter.stats.failed == 2
        assert emitter.stats.dropped == 2
