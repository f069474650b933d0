"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.catalog_repo import CatalogRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.event_broker import EventBroker
from app.application.interfaces.result_cache import ResultCache, build_cache_key
from app.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "CatalogRepo",
    "ResultCache",
    "build_cache_key",
    # Messaging
    "EventBroker",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
