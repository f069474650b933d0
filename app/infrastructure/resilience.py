"""
Resilience wrapper: circuit breaker + fallback around an async dependency call.

Replaces declarative circuit-breaker annotations with an explicit object
composed around the mutation executor and the event emitter.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from app.domain.errors import ServiceUnavailableError
from app.infrastructure.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fallback = Callable[[CircuitBreaker], Any]


def fail_fast(breaker: CircuitBreaker) -> Any:
    """Fallback for the mutation executor: reject without calling the store."""
    raise ServiceUnavailableError(breaker.name, breaker.retry_after_seconds())


def log_and_drop(breaker: CircuitBreaker) -> None:
    """Fallback for the event emitter: the notification is dropped."""
    logger.warning(
        "Circuit open, dropping call",
        extra={"breaker_name": breaker.name, "retry_after": breaker.retry_after_seconds()},
    )
    return None


class ResilienceWrapper:
    """
    Guards calls to one dependency with a shared CircuitBreaker.

    Exceptions listed in `exclude` are domain outcomes (e.g. ConflictError):
    they propagate but count as a successful call to the dependency.
    """

    def __init__(
        self,
        breaker: CircuitBreaker,
        fallback: Fallback = fail_fast,
        exclude: tuple[type[BaseException], ...] = (),
    ) -> None:
        self._breaker = breaker
        self._fallback = fallback
        self._exclude = exclude

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def guard(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        permit = self._breaker.acquire()
        if permit is None:
            logger.info(
                "Call short-circuited",
                extra={"breaker_name": self._breaker.name, "state": self._breaker.state.value},
            )
            return self._fallback(self._breaker)

        try:
            result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            self._breaker.release_trial(permit)
            raise
        except self._exclude:
            self._breaker.record_success(permit)
            raise
        except Exception as exc:
            self._breaker.record_failure(exc, permit)
            logger.warning(
                "Guarded call failed",
                extra={
                    "breaker_name": self._breaker.name,
                    "error": str(exc),
                    "state": self._breaker.state.value,
                },
            )
            raise

        self._breaker.record_success(permit)
        return result
