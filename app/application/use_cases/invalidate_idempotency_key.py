import logging

from app.application.interfaces.result_cache import ResultCache

logger = logging.getLogger(__name__)


class InvalidateIdempotencyKeyUseCase:
    """Administrative correction: forget a cached result so the next call re-executes."""

    def __init__(self, result_cache: ResultCache) -> None:
        self._result_cache = result_cache

    async def execute(self, idem_key: str) -> bool:
        removed = await self._result_cache.delete(idem_key)
        logger.info("Idempotency key invalidated", extra={"idem_key": idem_key, "removed": removed})
        return removed
