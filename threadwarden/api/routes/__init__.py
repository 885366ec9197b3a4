"""API route registration."""

from fastapi import APIRouter, Depends, FastAPI

from threadwarden.api.dependencies import require_ingest_token
from threadwarden.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 router; every route behind the ingest token check."""
    router = APIRouter(prefix="/v1", dependencies=[Depends(require_ingest_token)])

    from threadwarden.api.routes.events import router as events_router
    from threadwarden.api.routes.sweeps import router as sweeps_router

    router.include_router(events_router, tags=["Events"])
    router.include_router(sweeps_router, tags=["Sweeps"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from threadwarden.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
