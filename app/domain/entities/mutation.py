"""Solicitud y resultado de una mutación del catálogo."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from app.domain.entities.catalog_item import CatalogItem
from app.domain.errors import (
    ConflictError,
    DomainError,
    InvalidRequestError,
    NotFoundError,
    ServiceUnavailableError,
    TransientError,
)


class OperationType(str, Enum):
    """Tipos de mutación soportados."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DEACTIVATE = "DEACTIVATE"
    REACTIVATE = "REACTIVATE"


class ErrorKind(str, Enum):
    """Categoría de falla de una mutación."""

    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    TRANSIENT = "TRANSIENT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    @classmethod
    def from_error(cls, error: DomainError) -> "ErrorKind":
        if isinstance(error, ConflictError):
            return cls.CONFLICT
        if isinstance(error, NotFoundError):
            return cls.NOT_FOUND
        if isinstance(error, InvalidRequestError):
            return cls.INVALID_REQUEST
        if isinstance(error, ServiceUnavailableError):
            return cls.SERVICE_UNAVAILABLE
        if isinstance(error, TransientError):
            return cls.TRANSIENT
        raise ValueError(f"Error sin categoría de mutación: {error.code}")


@dataclass(frozen=True)
class MutationRequest:
    """
    Mutación enviada por el cliente.

    Sin idempotency_key no hay deduplicación: cada llamada se ejecuta.
    """

    operation_type: OperationType
    payload: dict[str, Any] = field(default_factory=dict)
    idempotency_key: str | None = None
    target_id: int | None = None


@dataclass(frozen=True)
class MutationResult:
    """
    Resultado inmutable de una mutación.

    Es exactamente lo que se cachea bajo la idempotency key y se reproduce
    en los reintentos.
    """

    success: bool
    result_entity: CatalogItem | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def succeeded(cls, entity: CatalogItem) -> "MutationResult":
        return cls(success=True, result_entity=entity)

    @classmethod
    def failed(cls, error: DomainError) -> "MutationResult":
        return cls(
            success=False,
            error_kind=ErrorKind.from_error(error),
            error_message=error.message,
        )

    def to_bytes(self) -> bytes:
        data = {
            "success": self.success,
            "result_entity": self.result_entity.to_dict() if self.result_entity else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": self.error_message,
        }
        return json.dumps(data, sort_keys=True, separators=(",", ":")).encode()

    @classmethod
    def from_bytes(cls, raw: bytes) -> "MutationResult":
        """
        Reconstruye un resultado serializado con to_bytes.

        Raises:
            ValueError, KeyError o TypeError si el payload está corrupto.
        """
        data = json.loads(raw)
        entity = data["result_entity"]
        error_kind = data["error_kind"]
        return cls(
            success=bool(data["success"]),
            result_entity=CatalogItem.from_dict(entity) if entity else None,
            error_kind=ErrorKind(error_kind) if error_kind else None,
            error_message=data.get("error_message"),
        )
