"""ThreadStore abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from threadwarden.threads.models import UserThread


class ThreadStore(ABC):
    """Abstract interface for thread record storage.

    Single source of truth for attempt counts and thread activity.
    Implementations must make increment_attempts atomic per user without
    serializing different users behind one global lock.
    """

    async def ensure_schema(self) -> None:
        """Idempotently create storage structures. Default is a no-op."""
        return None

    @abstractmethod
    async def get_active(self, user_id: str) -> UserThread | None:
        """Get the most recently created active record for a user."""
        pass

    @abstractmethod
    async def get_by_thread_id(self, thread_id: str) -> UserThread | None:
        """Get the record for a platform thread id."""
        pass

    @abstractmethod
    async def create(self, user_id: str, thread_id: str, channel_id: str) -> UserThread:
        """Insert a new active record with attempt_count=0.

        Does not check for an existing active record; callers serialize.
        """
        pass

    @abstractmethod
    async def increment_attempts(self, user_id: str) -> int:
        """Atomically increment the active record's counter.

        Returns:
            The new attempt count, or 0 if the user has no active record
        """
        pass

    @abstractmethod
    async def deactivate(self, thread_id: str) -> bool:
        """Mark the record for thread_id inactive.

        Idempotent: unknown or already inactive ids are a no-op.

        Returns:
            True if a record changed state
        """
        pass

    @abstractmethod
    async def list_expired(self, now: datetime) -> list[UserThread]:
        """List active records whose expires_at is before now."""
        pass

    async def health_check(self) -> bool:
        """Check the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
        return None
