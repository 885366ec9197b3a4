"""Per-user lock arena.

In-process mutual exclusion keyed by user id. Locks are created on first
use and dropped as soon as no holder or waiter references them, so the
arena never grows with the number of users seen.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncGenerator


@dataclass
class _Slot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    refs: int = 0


class UserLockArena:
    """Per-user asyncio locks, reference counted.

    Two tasks acquiring the same user id run one after the other; tasks for
    different users never wait on each other.
    """

    def __init__(self) -> None:
        self._slots: dict[str, _Slot] = {}

    @asynccontextmanager
    async def acquire(self, user_id: str) -> AsyncGenerator[None, None]:
        """Hold the lock for user_id for the duration of the block.

        Usage:
            async with arena.acquire(user_id):
                # only one task per user runs here
        """
        slot = self._slots.get(user_id)
        if slot is None:
            slot = self._slots[user_id] = _Slot()
        slot.refs += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.refs -= 1
            if slot.refs == 0 and self._slots.get(user_id) is slot:
                del self._slots[user_id]

    def is_locked(self, user_id: str) -> bool:
        slot = self._slots.get(user_id)
        return slot is not None and slot.lock.locked()

    def __len__(self) -> int:
        """Number of users with a live lock."""
        return len(self._slots)
