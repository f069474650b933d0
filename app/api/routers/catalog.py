import math

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from app.api.dependencies import ServiceContainer, get_container, get_coordinator
from app.api.schemas.catalog import (
    CatalogItemResponse,
    CreateCatalogItemRequest,
    MutationErrorResponse,
    UpdateCatalogItemRequest,
)
from app.application.use_cases.idempotent_mutation import IdempotentMutationCoordinator
from app.domain.entities.mutation import ErrorKind, MutationRequest, MutationResult, OperationType

router = APIRouter()

_STATUS_BY_ERROR_KIND = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_REQUEST: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.TRANSIENT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Floor for Retry-After when the circuit has just closed again
MIN_RETRY_AFTER_SECONDS = 1


def _to_response(result: MutationResult, success_status: int, container: ServiceContainer):
    if result.success:
        body = CatalogItemResponse.from_entity(result.result_entity)
        return JSONResponse(status_code=success_status, content=body.model_dump(mode="json"))

    error = MutationErrorResponse(error_kind=result.error_kind.value, detail=result.error_message)
    headers = {}
    if result.error_kind is ErrorKind.SERVICE_UNAVAILABLE:
        retry_after = container.persistence_resilience.breaker.retry_after_seconds()
        headers["Retry-After"] = str(max(math.ceil(retry_after), MIN_RETRY_AFTER_SECONDS))
    return JSONResponse(
        status_code=_STATUS_BY_ERROR_KIND[result.error_kind],
        content=error.model_dump(),
        headers=headers,
    )


@router.post(
    "/catalog/items",
    response_model=CatalogItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": MutationErrorResponse}, 503: {"model": MutationErrorResponse}},
)
async def create_catalog_item(
    payload: CreateCatalogItemRequest,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    coordinator: IdempotentMutationCoordinator = Depends(get_coordinator),
    container: ServiceContainer = Depends(get_container),
):
    result = await coordinator.execute(
        MutationRequest(
            operation_type=OperationType.CREATE,
            payload=payload.model_dump(),
            idempotency_key=idem_key or None,
        )
    )
    return _to_response(result, status.HTTP_201_CREATED, container)


@router.put(
    "/catalog/items/{item_id}",
    response_model=CatalogItemResponse,
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": MutationErrorResponse},
        409: {"model": MutationErrorResponse},
        503: {"model": MutationErrorResponse},
    },
)
async def update_catalog_item(
    item_id: int,
    payload: UpdateCatalogItemRequest,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    coordinator: IdempotentMutationCoordinator = Depends(get_coordinator),
    container: ServiceContainer = Depends(get_container),
):
    result = await coordinator.execute(
        MutationRequest(
            operation_type=OperationType.UPDATE,
            payload=payload.model_dump(exclude_unset=True),
            idempotency_key=idem_key or None,
            target_id=item_id,
        )
    )
    return _to_response(result, status.HTTP_200_OK, container)


_ITEM_STATE_RESPONSES = {
    404: {"model": MutationErrorResponse},
    503: {"model": MutationErrorResponse},
}


async def _mutate_by_id(
    operation: OperationType,
    item_id: int,
    idem_key: str | None,
    coordinator: IdempotentMutationCoordinator,
    container: ServiceContainer,
):
    result = await coordinator.execute(
        MutationRequest(
            operation_type=operation,
            payload={},
            idempotency_key=idem_key or None,
            target_id=item_id,
        )
    )
    return _to_response(result, status.HTTP_200_OK, container)


@router.delete(
    "/catalog/items/{item_id}",
    response_model=CatalogItemResponse,
    status_code=status.HTTP_200_OK,
    responses=_ITEM_STATE_RESPONSES,
)
async def delete_catalog_item(
    item_id: int,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    coordinator: IdempotentMutationCoordinator = Depends(get_coordinator),
    container: ServiceContainer = Depends(get_container),
):
    """Elimina el ítem; la respuesta trae su último estado."""
    return await _mutate_by_id(OperationType.DELETE, item_id, idem_key, coordinator, container)


@router.patch(
    "/catalog/items/{item_id}/deactivate",
    response_model=CatalogItemResponse,
    status_code=status.HTTP_200_OK,
    responses=_ITEM_STATE_RESPONSES,
)
async def deactivate_catalog_item(
    item_id: int,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    coordinator: IdempotentMutationCoordinator = Depends(get_coordinator),
    container: ServiceContainer = Depends(get_container),
):
    return await _mutate_by_id(OperationType.DEACTIVATE, item_id, idem_key, coordinator, container)


@router.patch(
    "/catalog/items/{item_id}/reactivate",
    response_model=CatalogItemResponse,
    status_code=status.HTTP_200_OK,
    responses=_ITEM_STATE_RESPONSES,
)
async def reactivate_catalog_item(
    item_id: int,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    coordinator: IdempotentMutationCoordinator = Depends(get_coordinator),
    container: ServiceContainer = Depends(get_container),
):
    return await _mutate_by_id(OperationType.REACTIVATE, item_id, idem_key, coordinator, container)
