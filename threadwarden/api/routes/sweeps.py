"""Manual sweep trigger."""

from fastapi import APIRouter

from threadwarden.api.dependencies import ServiceDep
from threadwarden.api.models.responses import SweepResponse
from threadwarden.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/sweeps", response_model=SweepResponse)
async def run_sweep(service: ServiceDep) -> SweepResponse:
    """Run an expiry sweep now.

    Returns skipped=true when a scheduled sweep is already running.
    """
    result = await service.sweeper.run_once()
    logger.info("manual_sweep", skipped=result.skipped, examined=result.examined)
    return SweepResponse.from_result(result)
