"""API request and response models."""

from threadwarden.api.models.responses import (
    ErrorResponse,
    HealthResponse,
    MessageOutcomeResponse,
    SweepResponse,
    ThreadDeletedResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "MessageOutcomeResponse",
    "SweepResponse",
    "ThreadDeletedResponse",
]
