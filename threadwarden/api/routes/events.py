"""Event ingestion endpoints.

A relay connected to the platform gateway forwards message and
thread-deleted events here.
"""

from fastapi import APIRouter

from threadwarden.api.dependencies import ServiceDep
from threadwarden.api.models.responses import MessageOutcomeResponse, ThreadDeletedResponse
from threadwarden.observability.logging import get_logger
from threadwarden.platform.models import MessageEvent, ThreadDeletedEvent

logger = get_logger(__name__)

router = APIRouter(prefix="/events")


@router.post("/messages", response_model=MessageOutcomeResponse)
async def ingest_message(event: MessageEvent, service: ServiceDep) -> MessageOutcomeResponse:
    """Handle a message posted in the managed channel."""
    outcome = await service.router.handle_message(event)
    logger.debug("message_event_handled", message_id=event.message_id, outcome=outcome.value)
    return MessageOutcomeResponse(outcome=outcome)


@router.post("/thread-deleted", response_model=ThreadDeletedResponse)
async def ingest_thread_deleted(
    event: ThreadDeletedEvent, service: ServiceDep
) -> ThreadDeletedResponse:
    """Handle a thread removed on the platform."""
    deactivated = await service.router.handle_thread_deleted(event)
    return ThreadDeletedResponse(deactivated=deactivated)
