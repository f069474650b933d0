"""
Unit tests de las implementaciones de ResultCache (in-memory y Redis).
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.application.interfaces.clock import FakeClock
from app.application.interfaces.result_cache import build_cache_key
from app.domain.entities.catalog_item import CatalogItem
from app.domain.entities.idempotency_record import IdempotencyRecord
from app.domain.entities.mutation import ErrorKind, MutationResult
from app.domain.errors import ConflictError, IdempotencyReplayError
from app.infrastructure.cache.redis_result_cache import RedisResultCache
from app.infrastructure.in_memory.result_cache import InMemoryResultCache


def _result(item_id: int = 42) -> MutationResult:
    return MutationResult.succeeded(
        CatalogItem(
            id=item_id,
            title="Rayuela",
            author="Julio Cortázar",
            isbn="978-8437604572",
            price=Decimal("15.50"),
            stock_quantity=3,
            category="Novela",
        )
    )


def _bad_price_payload() -> bytes:
    return _result().to_bytes().replace(b'"15.50"', b'"abc"')


class TestInMemoryResultCache:
    """Caché de proceso con expiración perezosa"""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self):
        cache = InMemoryResultCache(clock=FakeClock())

        assert await cache.get("k1") == (None, False)

        await cache.put("k1", _result(), ttl_seconds=60)
        result, found = await cache.get("k1")

        assert found
        assert result == _result()
        assert cache.hits == 1
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = InMemoryResultCache(clock=clock)
        await cache.put("k1", _result(), ttl_seconds=60)

        clock.advance(seconds=59)
        assert (await cache.get("k1"))[1]

        clock.advance(seconds=1)
        assert await cache.get("k1") == (None, False)
        assert cache.record_for("k1") is None

    @pytest.mark.asyncio
    async def test_put_overwrites_previous_entry(self):
        cache = InMemoryResultCache(clock=FakeClock())
        await cache.put("k1", _result(1), ttl_seconds=60)
        await cache.put("k1", _result(2), ttl_seconds=60)

        result, _ = await cache.get("k1")

        assert result.result_entity.id == 2

    @pytest.mark.asyncio
    async def test_failed_result_round_trips(self):
        cache = InMemoryResultCache(clock=FakeClock())
        await cache.put("k1", MutationResult.failed(ConflictError("978-8437604572")), ttl_seconds=60)

        result, found = await cache.get("k1")

        assert found
        assert not result.success
        assert result.error_kind is ErrorKind.CONFLICT

    @pytest.mark.asyncio
    async def test_delete_reports_whether_key_existed(self):
        cache = InMemoryResultCache(clock=FakeClock())
        await cache.put("k1", _result(), ttl_seconds=60)

        assert await cache.delete("k1") is True
        assert await cache.delete("k1") is False
        assert await cache.get("k1") == (None, False)

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self):
        clock = FakeClock()
        cache = InMemoryResultCache(namespace="catalog", clock=clock)
        await cache.put("k1", _result(), ttl_seconds=60)

        record = cache.record_for("k1")

        assert record.key == "idempotency:catalog:k1"
        assert record.expires_at == clock.now() + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises_replay_error(self):
        clock = FakeClock()
        cache = InMemoryResultCache(namespace="catalog", clock=clock)
        cache_key = build_cache_key("catalog", "k1")
        cache._records[cache_key] = IdempotencyRecord.create(
            key=cache_key, result_payload=b"{not json", now=clock.now(), ttl_seconds=60
        )

        with pytest.raises(IdempotencyReplayError) as exc_info:
            await cache.get("k1")

        assert exc_info.value.idem_key == "k1"

    @pytest.mark.asyncio
    async def test_unparseable_price_raises_replay_error(self):
        clock = FakeClock()
        cache = InMemoryResultCache(namespace="catalog", clock=clock)
        cache_key = build_cache_key("catalog", "k1")
        cache._records[cache_key] = IdempotencyRecord.create(
            key=cache_key, result_payload=_bad_price_payload(), now=clock.now(), ttl_seconds=60
        )

        with pytest.raises(IdempotencyReplayError) as exc_info:
            await cache.get("k1")

        assert "abc" in exc_info.value.reason


class TestRedisResultCache:
    """Caché sobre Redis con cliente mockeado"""

    @pytest.mark.asyncio
    async def test_put_uses_set_with_expiry(self):
        client = AsyncMock()
        cache = RedisResultCache(client, namespace="catalog")

        await cache.put("k1", _result(), ttl_seconds=3600)

        client.set.assert_awaited_once_with(
            "idempotency:catalog:k1", _result().to_bytes(), ex=3600
        )

    @pytest.mark.asyncio
    async def test_get_decodes_stored_result(self):
        client = AsyncMock()
        client.get.return_value = _result().to_bytes()
        cache = RedisResultCache(client, namespace="catalog")

        result, found = await cache.get("k1")

        assert found
        assert result.result_entity.id == 42
        client.get.assert_awaited_once_with("idempotency:catalog:k1")

    @pytest.mark.asyncio
    async def test_get_miss(self):
        client = AsyncMock()
        client.get.return_value = None
        cache = RedisResultCache(client)

        assert await cache.get("k1") == (None, False)

    @pytest.mark.asyncio
    async def test_backend_failure_on_read_is_a_miss(self):
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("connection refused")
        cache = RedisResultCache(client)

        assert await cache.get("k1") == (None, False)

    @pytest.mark.asyncio
    async def test_backend_failure_on_write_is_swallowed(self):
        client = AsyncMock()
        client.set.side_effect = RedisConnectionError("connection refused")
        cache = RedisResultCache(client)

        await cache.put("k1", _result(), ttl_seconds=60)

        client.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises_replay_error(self):
        client = AsyncMock()
        client.get.return_value = b"garbage"
        cache = RedisResultCache(client)

        with pytest.raises(IdempotencyReplayError):
            await cache.get("k1")

    @pytest.mark.asyncio
    async def test_unparseable_price_raises_replay_error(self):
        client = AsyncMock()
        client.get.return_value = _bad_price_payload()
        cache = RedisResultCache(client)

        with pytest.raises(IdempotencyReplayError):
            await cache.get("k1")

    @pytest.mark.asyncio
    async def test_delete(self):
        client = AsyncMock()
        client.delete.side_effect = [1, 0]
        cache = RedisResultCache(client, namespace="catalog")

        assert await cache.delete("k1") is True
        assert await cache.delete("k1") is False
        client.delete.assert_awaited_with("idempotency:catalog:k1")

    @pytest.mark.asyncio
    async def test_delete_backend_failure_returns_false(self):
        client = AsyncMock()
        client.delete.side_effect = RedisConnectionError("connection refused")
        cache = RedisResultCache(client)

        assert await cache.delete("k1") is False
