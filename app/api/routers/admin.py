from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_invalidate_use_case
from app.application.use_cases.invalidate_idempotency_key import InvalidateIdempotencyKeyUseCase

router = APIRouter()


@router.delete("/admin/idempotency/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_idempotency_key(
    key: str,
    use_case: InvalidateIdempotencyKeyUseCase = Depends(get_invalidate_use_case),
):
    """
    Forget the cached result for an idempotency key.

    Idempotent: deleting an unknown key also answers 204.
    """
    await use_case.execute(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
