"""Entidad IdempotencyRecord - resultado cacheado bajo una idempotency key."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class IdempotencyRecord:
    """
    Registro creado en la primera ejecución exitosa de una key.

    Es de solo lectura; desaparece por expiración del TTL (no hay borrado
    explícito desde el coordinador).
    """

    key: str
    result_payload: bytes
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(cls, key: str, result_payload: bytes, now: datetime, ttl_seconds: int) -> "IdempotencyRecord":
        return cls(
            key=key,
            result_payload=result_payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
