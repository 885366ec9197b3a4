"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from threadwarden.api.dependencies import ServiceDep
from threadwarden.api.models.responses import HealthResponse
from threadwarden.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(service: ServiceDep, response: Response) -> HealthResponse:
    """Report store, platform and sweeper health.

    Responds 503 when any component is unhealthy.
    """
    components = await service.health()
    healthy = all(components.values())
    if not healthy:
        response.status_code = 503
        logger.warning("health_check_unhealthy", components=components)

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        components=components,
        timestamp=datetime.now(UTC),
    )


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
