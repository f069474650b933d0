import asyncio
import logging
from typing import Any

from app.application.interfaces.catalog_repo import CatalogRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.catalog_item import MUTABLE_FIELDS, REQUIRED_FIELDS
from app.domain.entities.mutation import MutationRequest, MutationResult, OperationType
from app.domain.errors import (
    ConflictError,
    DomainError,
    InvalidRequestError,
    NotFoundError,
    TransientError,
)

logger = logging.getLogger(__name__)


class MutationExecutor:
    """
    Applies a catalog mutation against the primary store.

    DomainError subclasses are expected outcomes and propagate unchanged;
    every other failure is reported as TransientError so the circuit breaker
    can account for it.
    """

    def __init__(
        self,
        catalog_repo: CatalogRepo,
        transaction_manager: TransactionManager,
        timeout_seconds: float | None = 5.0,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._transaction_manager = transaction_manager
        self._timeout_seconds = timeout_seconds

    async def execute(self, request: MutationRequest) -> MutationResult:
        _validate(request)
        try:
            return await asyncio.wait_for(self._apply(request), timeout=self._timeout_seconds)
        except DomainError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error(
                "Persistence call timed out",
                extra={"operation": request.operation_type.value, "timeout": self._timeout_seconds},
            )
            raise TransientError("database", "timeout") from exc
        except Exception as exc:
            logger.error(
                "Unexpected persistence failure",
                exc_info=exc,
                extra={"operation": request.operation_type.value},
            )
            raise TransientError("database", exc.__class__.__name__) from exc

    async def _apply(self, request: MutationRequest) -> MutationResult:
        operation = request.operation_type
        async with self._transaction_manager.start():
            if operation is OperationType.CREATE:
                fields = _mutable_fields(request.payload)
                isbn = fields["isbn"]
                if await self._catalog_repo.exists_by_natural_key(isbn):
                    raise ConflictError(isbn)
                item = await self._catalog_repo.create(fields)
                logger.info("Catalog item created", extra={"item_id": item.id, "isbn": item.isbn})
                return MutationResult.succeeded(item)

            if request.target_id is None:
                raise NotFoundError(None)
            if operation is OperationType.DELETE:
                item = await self._catalog_repo.delete_by_id(request.target_id)
            elif operation is OperationType.UPDATE:
                item = await self._catalog_repo.update_by_id(
                    request.target_id, _mutable_fields(request.payload)
                )
            else:
                active = operation is OperationType.REACTIVATE
                item = await self._catalog_repo.update_by_id(request.target_id, {"active": active})
            if item is None:
                raise NotFoundError(request.target_id)
            logger.info(
                "Catalog item mutated",
                extra={"operation": operation.value, "item_id": item.id, "version": item.version},
            )
        return MutationResult.succeeded(item)


def _validate(request: MutationRequest) -> None:
    # Missing fields are a client error; they never reach the store
    if request.operation_type is not OperationType.CREATE:
        return
    missing = [name for name in REQUIRED_FIELDS if request.payload.get(name) is None]
    if missing:
        raise InvalidRequestError(missing)


def _mutable_fields(payload: dict[str, Any]) -> dict[str, Any]:
    # Only non-null fields are applied (partial update)
    return {name: payload[name] for name in MUTABLE_FIELDS if payload.get(name) is not None}
