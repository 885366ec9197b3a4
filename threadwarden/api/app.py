"""FastAPI application factory.

Creates the ingestion API with a lifespan that starts and stops the
ThreadWardenService, exception handlers and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from threadwarden.api.models.responses import ErrorResponse
from threadwarden.api.routes import register_routes
from threadwarden.config import get_settings
from threadwarden.config.settings import Settings
from threadwarden.db.errors import StoreError
from threadwarden.observability.logging import get_logger
from threadwarden.service import ThreadWardenService

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    service: ThreadWardenService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to build the service from (loaded when omitted)
        service: Prebuilt service, started and stopped by the app lifespan

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If the settings cannot build a service
    """
    if settings is None:
        settings = service.settings if service is not None else get_settings()
    svc = service or ThreadWardenService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await svc.start()
        app.state.service = svc
        try:
            yield
        finally:
            app.state.service = None
            await svc.stop()

    app = FastAPI(
        title="threadwarden",
        description="Per-user support thread manager",
        version="1.0.0",
        lifespan=lifespan,
    )

    _register_exception_handlers(app)
    register_routes(app)

    logger.info(
        "app_created",
        debug=settings.debug,
        platform=settings.discord.backend,
        storage=settings.storage.backend,
    )
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("store_unavailable", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(code="STORE_UNAVAILABLE", message=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                code="INTERNAL_ERROR", message="An unexpected error occurred"
            ).model_dump(),
        )
