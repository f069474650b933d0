"""Interface Clock - Puerto para abstracción de tiempo."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Puerto para abstracción del tiempo del sistema.

    El TTL de idempotencia y las ventanas del circuit breaker leen el tiempo
    a través de este puerto, lo que permite tests deterministas.
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Retorna la fecha/hora actual.

        Returns:
            datetime con la hora actual (timezone-aware UTC).
        """
        raise NotImplementedError


class SystemClock(Clock):
    """Implementación real que usa el reloj del sistema."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock(Clock):
    """
    Implementación fake para testing.

    Permite fijar y avanzar el tiempo manualmente.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        self._fixed_time = new_time

    def advance(self, seconds: float = 0, minutes: int = 0, hours: int = 0) -> None:
        """
        Avanza el tiempo fijo.

        Args:
            seconds: Segundos a avanzar.
            minutes: Minutos a avanzar.
            hours: Horas a avanzar.
        """
        self._fixed_time += timedelta(seconds=seconds, minutes=minutes, hours=hours)
