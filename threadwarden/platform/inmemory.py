"""In-process platform for testing and local runs."""

import asyncio
from collections import defaultdict, deque
from dataclasses import dataclass, field
from itertools import count
from typing import Any

from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import DirectMessagesDisabled, FaultKind, PlatformError
from threadwarden.platform.models import ThreadInfo


@dataclass
class _Thread:
    thread_id: str
    name: str
    parent_id: str
    archived: bool = False
    locked: bool = False


@dataclass
class SentLog:
    """A notification posted through post_log."""

    channel_id: str
    title: str
    description: str
    details: str | None = None
    color: int | None = None


@dataclass
class InMemoryState:
    """Observable side effects, for assertions."""

    direct_messages: list[tuple[str, str]] = field(default_factory=list)
    deleted_messages: list[tuple[str, str]] = field(default_factory=list)
    removed_members: list[tuple[str, str, str]] = field(default_factory=list)
    deleted_threads: list[str] = field(default_factory=list)
    logs: list[SentLog] = field(default_factory=list)


class InMemoryPlatform(ThreadPlatform):
    """In-memory ThreadPlatform.

    Keeps threads in a dict and records every side effect. Failures can be
    injected per operation with fail_next(); latency makes every call yield
    to the event loop so concurrent callers really interleave.
    """

    def __init__(
        self,
        latency: float = 0.0,
        can_remove: bool = True,
        guild_id: str = "100000000000000000",
    ) -> None:
        """Initialize in-memory platform.

        Args:
            latency: Seconds each call sleeps before acting
            can_remove: Whether member removal is permitted
            guild_id: Guild used when building links
        """
        self._latency = latency
        self._can_remove = can_remove
        self._guild_id = guild_id
        self._threads: dict[str, _Thread] = {}
        self._ids = count(900000000000000001)
        self._faults: dict[str, deque[PlatformError]] = defaultdict(deque)
        self._dm_disabled: set[str] = set()
        self._missing_permissions: dict[str, list[str]] = {}
        self._call_history: list[dict[str, Any]] = []
        self.state = InMemoryState()

    @property
    def platform_name(self) -> str:
        return "inmemory"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def calls(self, operation: str) -> list[dict[str, Any]]:
        """Calls made to one operation."""
        return [c for c in self._call_history if c["operation"] == operation]

    def fail_next(self, operation: str, error: PlatformError, times: int = 1) -> None:
        """Make the next `times` calls of an operation raise error."""
        for _ in range(times):
            self._faults[operation].append(error)

    def disable_direct_messages(self, user_id: str) -> None:
        self._dm_disabled.add(user_id)

    def set_can_remove(self, allowed: bool) -> None:
        self._can_remove = allowed

    def set_missing_permissions(self, channel_id: str, missing: list[str]) -> None:
        self._missing_permissions[channel_id] = missing

    def add_thread(
        self,
        thread_id: str,
        parent_id: str = "",
        name: str = "",
        *,
        archived: bool = False,
        locked: bool = False,
    ) -> None:
        """Seed a thread, as if it had been opened earlier."""
        self._threads[thread_id] = _Thread(
            thread_id=thread_id,
            name=name,
            parent_id=parent_id,
            archived=archived,
            locked=locked,
        )

    def remove_thread(self, thread_id: str) -> None:
        """Delete a thread out-of-band."""
        self._threads.pop(thread_id, None)

    def get_thread(self, thread_id: str) -> ThreadInfo | None:
        """Synchronous peek at a thread without recording a call."""
        thread = self._threads.get(thread_id)
        return self._to_info(thread) if thread else None

    @property
    def open_threads(self) -> list[ThreadInfo]:
        return [self._to_info(t) for t in self._threads.values() if not t.archived]

    @staticmethod
    def _to_info(thread: _Thread) -> ThreadInfo:
        return ThreadInfo(
            thread_id=thread.thread_id,
            name=thread.name,
            parent_id=thread.parent_id,
            archived=thread.archived,
            locked=thread.locked,
        )

    async def _call(self, operation: str, **kwargs: Any) -> None:
        self._call_history.append({"operation": operation, **kwargs})
        if self._latency:
            await asyncio.sleep(self._latency)
        else:
            await asyncio.sleep(0)
        queue = self._faults.get(operation)
        if queue:
            raise queue.popleft()

    def _require_thread(self, operation: str, thread_id: str) -> _Thread:
        thread = self._threads.get(thread_id)
        if thread is None:
            raise PlatformError(
                f"Unknown Channel {thread_id}",
                FaultKind.PERMANENT,
                reason="unknown_channel",
                code=10003,
                status=404,
                operation=operation,
            )
        return thread

    async def open_thread(
        self,
        channel_id: str,
        message_id: str,
        name: str,
        auto_archive_minutes: int,
    ) -> str:
        await self._call(
            "open_thread",
            channel_id=channel_id,
            message_id=message_id,
            name=name,
            auto_archive_minutes=auto_archive_minutes,
        )
        thread_id = str(next(self._ids))
        self._threads[thread_id] = _Thread(thread_id=thread_id, name=name, parent_id=channel_id)
        return thread_id

    async def delete_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._call("delete_thread", thread_id=thread_id, reason=reason)
        self._require_thread("delete_thread", thread_id)
        del self._threads[thread_id]
        self.state.deleted_threads.append(thread_id)

    async def lock_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._call("lock_thread", thread_id=thread_id, reason=reason)
        thread = self._require_thread("lock_thread", thread_id)
        if thread.archived:
            raise PlatformError(
                f"Thread {thread_id} is archived",
                FaultKind.TRANSIENT,
                reason="rejected",
                code=50083,
                status=400,
                operation="lock_thread",
            )
        thread.locked = True

    async def archive_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._call("archive_thread", thread_id=thread_id, reason=reason)
        self._require_thread("archive_thread", thread_id).archived = True

    async def close_thread(self, thread_id: str, reason: str | None = None) -> None:
        await self._call("close_thread", thread_id=thread_id, reason=reason)
        thread = self._require_thread("close_thread", thread_id)
        thread.locked = True
        thread.archived = True

    async def fetch_thread(self, thread_id: str) -> ThreadInfo | None:
        await self._call("fetch_thread", thread_id=thread_id)
        thread = self._threads.get(thread_id)
        return self._to_info(thread) if thread else None

    async def remove_member(self, guild_id: str, user_id: str, reason: str) -> None:
        await self._call("remove_member", guild_id=guild_id, user_id=user_id, reason=reason)
        self.state.removed_members.append((guild_id, user_id, reason))

    async def can_remove_members(self, guild_id: str) -> bool:
        await self._call("can_remove_members", guild_id=guild_id)
        return self._can_remove

    async def send_direct(self, user_id: str, text: str) -> None:
        await self._call("send_direct", user_id=user_id, text=text)
        if user_id in self._dm_disabled:
            raise DirectMessagesDisabled(code=50007, status=403)
        self.state.direct_messages.append((user_id, text))

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self._call("delete_message", channel_id=channel_id, message_id=message_id)
        self.state.deleted_messages.append((channel_id, message_id))

    async def post_log(
        self,
        channel_id: str,
        title: str,
        description: str,
        details: str | None = None,
        color: int | None = None,
    ) -> None:
        await self._call("post_log", channel_id=channel_id, title=title)
        self.state.logs.append(
            SentLog(
                channel_id=channel_id,
                title=title,
                description=description,
                details=details,
                color=color,
            )
        )

    async def check_channel_access(self, channel_id: str) -> list[str]:
        await self._call("check_channel_access", channel_id=channel_id)
        return list(self._missing_permissions.get(channel_id, []))

    def thread_link(self, guild_id: str, thread_id: str) -> str:
        return f"https://discord.com/channels/{guild_id or self._guild_id}/{thread_id}"
