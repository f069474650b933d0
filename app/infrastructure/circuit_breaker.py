"""
Circuit Breaker for the catalog service dependencies.

One breaker per guarded resource (persistence, event broker) prevents
cascading failures when a dependency degrades.

Circuit Breaker Pattern:
- CLOSED: Normal operation, failures are counted in a sliding window
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, a single trial request allowed

Configuration:
- fail_max: Failures within the window that open the circuit
- window_seconds: Width of the sliding failure window
- reset_timeout: Seconds to wait before attempting recovery (HALF_OPEN)
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from app.application.interfaces.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class BreakerState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass
class CircuitState:
    state: BreakerState = BreakerState.CLOSED
    failure_count: int = 0
    last_failure_at: datetime | None = None
    opened_until: datetime | None = None


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str):
    """
    Log circuit breaker state changes for monitoring and alerting.

    In production, this should trigger alerts when circuits open.
    """
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        }
    )


@dataclass(frozen=True)
class CallPermit:
    """Admission ticket returned by CircuitBreaker.acquire()."""

    trial: bool
    generation: int


class CircuitBreakerListener:
    """Listener for circuit breaker events."""

    def state_change(self, breaker: "CircuitBreaker", old_state: BreakerState, new_state: BreakerState) -> None:
        pass

    def failure(self, breaker: "CircuitBreaker", exc: BaseException) -> None:
        pass

    def success(self, breaker: "CircuitBreaker") -> None:
        pass


class LoggingListener(CircuitBreakerListener):
    def state_change(self, breaker, old_state, new_state):
        log_circuit_state_change(breaker.name, old_state.value, new_state.value)


class CircuitBreaker:
    """
    Explicit circuit breaker state machine.

    Callers ask for admission with acquire() and report the outcome with
    record_success()/record_failure(), passing back the permit they got.
    release_trial() gives back an admitted HALF_OPEN slot whose call never
    completed (e.g. cancelled).
    All transitions happen under a mutex, never across an await.
    """

    def __init__(
        self,
        name: str,
        fail_max: int = 5,
        reset_timeout: float = 60,
        window_seconds: float = 60,
        clock: Clock | None = None,
        listeners: list[CircuitBreakerListener] | None = None,
    ) -> None:
        if fail_max < 1:
            raise ValueError("fail_max must be >= 1")
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout
        self.window_seconds = window_seconds
        self._clock = clock or SystemClock()
        self._listeners = list(listeners if listeners is not None else [LoggingListener()])
        self._lock = threading.RLock()
        self._state = CircuitState()
        self._failures: deque[datetime] = deque()
        self._trial_in_flight = False
        # Bumped every time the circuit opens
        self._generation = 0

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._state.state

    def snapshot(self) -> CircuitState:
        with self._lock:
            return replace(self._state)

    def add_listener(self, listener: CircuitBreakerListener) -> None:
        self._listeners.append(listener)

    def retry_after_seconds(self) -> float:
        with self._lock:
            if self._state.opened_until is None:
                return 0.0
            remaining = (self._state.opened_until - self._clock.now()).total_seconds()
            return max(remaining, 0.0)

    def acquire(self) -> CallPermit | None:
        """Admission check; may move OPEN -> HALF_OPEN once the timer elapsed.

        Returns None when the call must be short-circuited. The permit is
        handed back with the outcome so a late result from a call admitted
        before the circuit opened cannot settle the HALF_OPEN trial.
        """
        with self._lock:
            current = self._state.state
            if current is BreakerState.CLOSED:
                return CallPermit(trial=False, generation=self._generation)
            if current is BreakerState.OPEN:
                if self._clock.now() < self._state.opened_until:
                    return None
                self._transition(BreakerState.HALF_OPEN)
            elif self._trial_in_flight:
                return None
            self._trial_in_flight = True
            return CallPermit(trial=True, generation=self._generation)

    def allow_request(self) -> bool:
        return self.acquire() is not None

    def record_success(self, permit: CallPermit | None = None) -> None:
        with self._lock:
            if self._state.state is BreakerState.HALF_OPEN and self._owns_trial(permit):
                self._trial_in_flight = False
                self._failures.clear()
                self._state.failure_count = 0
                self._state.opened_until = None
                self._transition(BreakerState.CLOSED)
        for listener in self._listeners:
            listener.success(self)

    def record_failure(self, exc: BaseException, permit: CallPermit | None = None) -> None:
        with self._lock:
            now = self._clock.now()
            self._state.last_failure_at = now
            if self._state.state is BreakerState.HALF_OPEN:
                if self._owns_trial(permit):
                    self._trial_in_flight = False
                    self._open(now)
            elif self._state.state is BreakerState.CLOSED:
                self._failures.append(now)
                self._prune(now)
                self._state.failure_count = len(self._failures)
                if self._state.failure_count >= self.fail_max:
                    self._open(now)
        for listener in self._listeners:
            listener.failure(self, exc)

    def release_trial(self, permit: CallPermit | None = None) -> None:
        with self._lock:
            if self._state.state is BreakerState.HALF_OPEN and self._owns_trial(permit):
                self._trial_in_flight = False

    def reset(self) -> None:
        """Force the breaker CLOSED (admin/tests)."""
        with self._lock:
            self._failures.clear()
            self._trial_in_flight = False
            self._state.failure_count = 0
            self._state.opened_until = None
            if self._state.state is not BreakerState.CLOSED:
                self._transition(BreakerState.CLOSED)

    def _owns_trial(self, permit: CallPermit | None) -> bool:
        # No permit: direct caller reporting for the current trial
        if permit is None:
            return True
        return permit.trial and permit.generation == self._generation

    def _open(self, now: datetime) -> None:
        self._generation += 1
        self._state.opened_until = now + timedelta(seconds=self.reset_timeout)
        if self._state.state is not BreakerState.OPEN:
            self._transition(BreakerState.OPEN)

    def _prune(self, now: datetime) -> None:
        horizon = now - timedelta(seconds=self.window_seconds)
        while self._failures and self._failures[0] <= horizon:
            self._failures.popleft()

    def _transition(self, new_state: BreakerState) -> None:
        old_state = self._state.state
        self._state.state = new_state
        for listener in self._listeners:
            try:
                listener.state_change(self, old_state, new_state)
            except Exception:
                logger.exception("Circuit breaker listener failed", extra={"breaker_name": self.name})


__all__ = [
    "BreakerState",
    "CallPermit",
    "CircuitBreaker",
    "CircuitBreakerListener",
    "CircuitState",
    "LoggingListener",
]
