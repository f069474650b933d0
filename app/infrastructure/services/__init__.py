"""Servicios de infraestructura."""

from app.infrastructure.services.key_lock import KeyedLock

__all__ = [
    "KeyedLock",
]
