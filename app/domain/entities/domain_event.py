"""Entidad DomainEvent - notificación de un cambio de estado del catálogo."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from app.domain.entities.mutation import MutationResult, OperationType


class EventType(str, Enum):
    """Tipos de eventos publicados al broker."""

    ITEM_CREATED = "ITEM_CREATED"
    ITEM_UPDATED = "ITEM_UPDATED"
    ITEM_DELETED = "ITEM_DELETED"
    ITEM_DEACTIVATED = "ITEM_DEACTIVATED"
    ITEM_REACTIVATED = "ITEM_REACTIVATED"


_EVENT_TYPE_BY_OPERATION = {
    OperationType.CREATE: EventType.ITEM_CREATED,
    OperationType.UPDATE: EventType.ITEM_UPDATED,
    OperationType.DELETE: EventType.ITEM_DELETED,
    OperationType.DEACTIVATE: EventType.ITEM_DEACTIVATED,
    OperationType.REACTIVATE: EventType.ITEM_REACTIVATED,
}


@dataclass(frozen=True)
class DomainEvent:
    """
    Evento emitido una vez por cada mutación exitosa.

    Los consumidores deben ser idempotentes: el mismo evento puede llegar
    más de una vez, o no llegar (reconciliación por lectura periódica).
    """

    event_type: EventType
    entity_id: int
    payload_snapshot: dict[str, Any]
    timestamp: datetime
    event_id: UUID = field(default_factory=uuid4)

    @property
    def partition_key(self) -> str:
        """Eventos del mismo entity_id van a la misma partición."""
        return str(self.entity_id)

    def to_message(self) -> bytes:
        return json.dumps(
            {
                "eventId": str(self.event_id),
                "eventType": self.event_type.value,
                "entityId": self.entity_id,
                "payload": self.payload_snapshot,
                "timestamp": self.timestamp.isoformat(),
            },
            separators=(",", ":"),
        ).encode()

    @classmethod
    def from_result(
        cls,
        operation_type: OperationType,
        result: MutationResult,
        timestamp: datetime,
    ) -> "DomainEvent":
        """Factory a partir de un resultado exitoso."""
        if not result.success or result.result_entity is None:
            raise ValueError("Solo las mutaciones exitosas generan eventos")
        entity = result.result_entity
        return cls(
            event_type=_EVENT_TYPE_BY_OPERATION[operation_type],
            entity_id=entity.id,
            payload_snapshot=entity.snapshot(),
            timestamp=timestamp,
        )
