"""Thread record model."""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TTL = timedelta(hours=24)


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class UserThread(BaseModel):
    """A user's support thread as tracked locally.

    At most one record per user is active at a time. Records are never
    deleted; inactive ones are kept as history.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: int = Field(..., description="Store-assigned identifier")
    user_id: str = Field(..., description="Platform user id")
    thread_id: str = Field(..., description="Platform thread id")
    channel_id: str = Field(..., description="Channel the thread was opened from")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    expires_at: datetime = Field(..., description="created_at + TTL")
    attempt_count: int = Field(default=0, ge=0, description="Duplicate posts while active")
    is_active: bool = Field(default=True, description="Whether the thread is open")

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the record is past its time-to-live."""
        return self.expires_at < (now or utc_now())
