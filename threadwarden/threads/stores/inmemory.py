"""In-memory implementation of ThreadStore."""

from collections.abc import Callable
from datetime import datetime, timedelta
from itertools import count

from threadwarden.threads.models import DEFAULT_TTL, UserThread, utc_now
from threadwarden.threads.store import ThreadStore


class InMemoryThreadStore(ThreadStore):
    """In-memory implementation of ThreadStore for testing and development.

    Uses simple dict storage with linear scan for queries. No operation
    awaits between reading and writing a record, so each one is atomic on
    the event loop. Not suitable for production use.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize empty storage.

        Args:
            ttl: Lifetime given to new records
            clock: Source of "now" for created_at
        """
        self._ttl = ttl
        self._clock = clock
        self._records: dict[int, UserThread] = {}
        self._ids = count(1)

    def _latest_active(self, user_id: str) -> UserThread | None:
        candidates = [
            record
            for record in self._records.values()
            if record.user_id == user_id and record.is_active
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda r: (r.created_at, r.id))

    async def get_active(self, user_id: str) -> UserThread | None:
        """Get the most recently created active record for a user."""
        record = self._latest_active(user_id)
        return record.model_copy() if record else None

    async def get_by_thread_id(self, thread_id: str) -> UserThread | None:
        """Get the record for a platform thread id."""
        for record in self._records.values():
            if record.thread_id == thread_id:
                return record.model_copy()
        return None

    async def create(self, user_id: str, thread_id: str, channel_id: str) -> UserThread:
        """Insert a new active record."""
        now = self._clock()
        record = UserThread(
            id=next(self._ids),
            user_id=user_id,
            thread_id=thread_id,
            channel_id=channel_id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._records[record.id] = record
        return record.model_copy()

    async def increment_attempts(self, user_id: str) -> int:
        """Increment the active record's counter and return the new value."""
        record = self._latest_active(user_id)
        if record is None:
            return 0
        record.attempt_count += 1
        return record.attempt_count

    async def deactivate(self, thread_id: str) -> bool:
        """Mark every active record for thread_id inactive."""
        changed = False
        for record in self._records.values():
            if record.thread_id == thread_id and record.is_active:
                record.is_active = False
                changed = True
        return changed

    async def list_expired(self, now: datetime) -> list[UserThread]:
        """List active records whose expires_at is before now."""
        results = [
            record.model_copy()
            for record in self._records.values()
            if record.is_active and record.expires_at < now
        ]
        results.sort(key=lambda r: r.expires_at)
        return results

    def all_records(self) -> list[UserThread]:
        """Return copies of every record, active or not, for assertions."""
        return [record.model_copy() for record in self._records.values()]
