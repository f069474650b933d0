"""Entidades del dominio."""

from app.domain.entities.catalog_item import CatalogItem
from app.domain.entities.domain_event import DomainEvent, EventType
from app.domain.entities.idempotency_record import IdempotencyRecord
from app.domain.entities.mutation import (
    ErrorKind,
    MutationRequest,
    MutationResult,
    OperationType,
)

__all__ = [
    "CatalogItem",
    "DomainEvent",
    "ErrorKind",
    "EventType",
    "IdempotencyRecord",
    "MutationRequest",
    "MutationResult",
    "OperationType",
]
