"""
Redis-backed idempotency result cache.

Values are the serialized MutationResult stored with SET ... EX ttl, so
expiry is handled by Redis eviction. Backend failures never propagate:
losing a cache read or write only risks a re-execution, not data loss.
"""

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.application.interfaces.result_cache import ResultCache, build_cache_key
from app.domain.entities.mutation import MutationResult
from app.domain.errors import IdempotencyReplayError

logger = logging.getLogger(__name__)


class RedisResultCache(ResultCache):
    def __init__(self, client: Redis, namespace: str = "catalog") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "catalog") -> "RedisResultCache":
        return cls(Redis.from_url(url), namespace=namespace)

    async def get(self, idem_key: str) -> tuple[MutationResult | None, bool]:
        cache_key = build_cache_key(self._namespace, idem_key)
        try:
            raw = await self._client.get(cache_key)
        except RedisError as exc:
            logger.warning(
                "Idempotency cache read failed, treating as miss",
                extra={"cache_key": cache_key, "error": str(exc)},
            )
            return None, False

        if raw is None:
            logger.debug("Idempotency cache miss", extra={"cache_key": cache_key})
            return None, False

        try:
            result = MutationResult.from_bytes(raw)
        except (ValueError, KeyError, TypeError) as exc:
            raise IdempotencyReplayError(idem_key, str(exc)) from exc
        logger.debug("Idempotency cache hit", extra={"cache_key": cache_key})
        return result, True

    async def put(self, idem_key: str, result: MutationResult, ttl_seconds: int) -> None:
        cache_key = build_cache_key(self._namespace, idem_key)
        try:
            await self._client.set(cache_key, result.to_bytes(), ex=ttl_seconds)
        except RedisError as exc:
            logger.warning(
                "Idempotency cache write failed, result not cached",
                extra={"cache_key": cache_key, "error": str(exc)},
            )
            return
        logger.info("Cached mutation result", extra={"cache_key": cache_key, "ttl_seconds": ttl_seconds})

    async def delete(self, idem_key: str) -> bool:
        cache_key = build_cache_key(self._namespace, idem_key)
        try:
            removed = await self._client.delete(cache_key)
        except RedisError as exc:
            logger.error(
                "Idempotency cache invalidation failed",
                extra={"cache_key": cache_key, "error": str(exc)},
            )
            return False
        return bool(removed)

    async def close(self) -> None:
        await self._client.aclose()
