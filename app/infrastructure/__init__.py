"""
Capa de Infraestructura - Servicio de mutaciones del catálogo.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).
Incluye adaptadores para base de datos, caché, mensajería y resiliencia.

Estructura:
- db/: Repositorio SQL y configuración de base de datos
- cache/: Caché de resultados idempotentes sobre Redis
- messaging/: Productor Kafka de eventos de dominio
- in_memory/: Implementaciones in-memory para testing
- services/: Servicios de infraestructura (locks por clave)
- circuit_breaker.py / resilience.py: Circuit breaker y políticas de fallback
"""

# Database
from app.infrastructure.db.repositories.catalog_repo_sql import CatalogRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager

# Cache
from app.infrastructure.cache.redis_result_cache import RedisResultCache

# Messaging
from app.infrastructure.messaging.kafka_event_broker import KafkaEventBroker

# In-Memory (for testing)
from app.infrastructure.in_memory import (
    InMemoryCatalogRepo,
    InMemoryEventBroker,
    InMemoryResultCache,
    InMemoryTransactionManager,
)

# Resilience
from app.infrastructure.circuit_breaker import BreakerState, CircuitBreaker
from app.infrastructure.resilience import ResilienceWrapper, fail_fast, log_and_drop

# Services
from app.infrastructure.services.key_lock import KeyedLock

__all__ = [
    # Database - Repositories SQL
    "CatalogRepoSQL",
    "SQLAlchemyTransactionManager",
    # Cache
    "RedisResultCache",
    # Messaging
    "KafkaEventBroker",
    # In-Memory Implementations
    "InMemoryCatalogRepo",
    "InMemoryEventBroker",
    "InMemoryResultCache",
    "InMemoryTransactionManager",
    # Resilience
    "BreakerState",
    "CircuitBreaker",
    "ResilienceWrapper",
    "fail_fast",
    "log_and_drop",
    # Services
    "KeyedLock",
]
