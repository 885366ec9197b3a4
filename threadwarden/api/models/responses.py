"""Response models for the ingestion API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from threadwarden.gate.gate import GateOutcome
from threadwarden.jobs.sweeper import SweepResult


class MessageOutcomeResponse(BaseModel):
    """What the gate did with a message event."""

    outcome: GateOutcome


class ThreadDeletedResponse(BaseModel):
    """Result of a thread-deleted event."""

    deactivated: bool = Field(..., description="A tracked record was deactivated")


class SweepResponse(BaseModel):
    """Counts from one expiry sweep."""

    examined: int = 0
    closed: int = 0
    missing: int = 0
    abandoned: int = 0
    retry_pending: int = 0
    failed: int = 0
    skipped: bool = False
    outcomes: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: SweepResult) -> "SweepResponse":
        return cls(
            examined=result.examined,
            closed=result.closed,
            missing=result.missing,
            abandoned=result.abandoned,
            retry_pending=result.retry_pending,
            failed=result.failed,
            skipped=result.skipped,
            outcomes=dict(result.outcomes),
        )


class HealthResponse(BaseModel):
    """Service health."""

    status: Literal["healthy", "unhealthy"]
    components: dict[str, bool]
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    code: str
    message: str
