"""Implementaciones in-memory para testing y modo demo."""

from app.infrastructure.in_memory.catalog_repo import InMemoryCatalogRepo
from app.infrastructure.in_memory.event_broker import BrokerMessage, InMemoryEventBroker
from app.infrastructure.in_memory.result_cache import InMemoryResultCache
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager as InMemoryTransactionManager

__all__ = [
    # Repositories
    "InMemoryCatalogRepo",
    "InMemoryResultCache",
    # Messaging
    "BrokerMessage",
    "InMemoryEventBroker",
    # Infrastructure
    "InMemoryTransactionManager",
]
