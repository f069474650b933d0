import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import build_container
from app.api.routers.admin import router as admin_router
from app.api.routers.catalog import router as catalog_router
from app.api.routers.health import router as health_router
from app.application.interfaces.clock import Clock
from app.config import Settings, get_settings
from app.domain.errors import DomainError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR_CODE = {
    "CONFLICT": 409,
    "NOT_FOUND": 404,
    "INVALID_REQUEST": 422,
    "TRANSIENT": 503,
    "SERVICE_UNAVAILABLE": 503,
}


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    settings = settings or get_settings()

    # Configure structured logging
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container = build_container(settings, clock=clock)
        app.state.container = container
        await container.startup()
        logger.info(
            "Catalog service started",
            extra={"in_memory": settings.use_in_memory, "namespace": settings.idempotency_namespace},
        )
        yield
        # Cleanup
        await container.shutdown()

    app = FastAPI(
        title="Catalog Mutation API",
        version="0.1.0",
        lifespan=lifespan
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Domain errors that escaped the coordinator keep their category."""
        logger.warning(
            "Domain error reached the API boundary",
            extra={"code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=_STATUS_BY_ERROR_CODE.get(exc.code, 500),
            content={"error_kind": exc.code, "detail": exc.message},
        )

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception handler to prevent stack trace exposure to clients.
        All unhandled exceptions are logged internally and return a generic error message.
        """
        error_id = str(uuid.uuid4())

        logger.error(
            "Unhandled exception occurred",
            exc_info=exc,
            extra={
                "error_id": error_id,
                "path": request.url.path,
                "method": request.method,
                "client_host": request.client.host if request.client else None,
            }
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error_id": error_id,
                "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
            }
        )

    app.include_router(health_router, tags=["Health"])
    app.include_router(catalog_router, prefix="/api/v1", tags=["Catalog"])
    app.include_router(admin_router, prefix="/api/v1", tags=["Admin"])
    return app


app = create_app()
