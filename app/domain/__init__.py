"""
Capa de Dominio - Servicio de mutaciones del catálogo.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Entidades del dominio (CatalogItem, MutationResult, DomainEvent, etc.)
- errors.py: Excepciones específicas del dominio
"""

from app.domain.entities import (
    CatalogItem,
    DomainEvent,
    ErrorKind,
    EventType,
    IdempotencyRecord,
    MutationRequest,
    MutationResult,
    OperationType,
)
from app.domain.errors import (
    ConflictError,
    DomainError,
    IdempotencyReplayError,
    InvalidRequestError,
    NotFoundError,
    ServiceUnavailableError,
    TransientError,
)

__all__ = [
    # Entities
    "CatalogItem",
    "DomainEvent",
    "ErrorKind",
    "EventType",
    "IdempotencyRecord",
    "MutationRequest",
    "MutationResult",
    "OperationType",
    # Errors
    "ConflictError",
    "DomainError",
    "IdempotencyReplayError",
    "InvalidRequestError",
    "NotFoundError",
    "ServiceUnavailableError",
    "TransientError",
]
