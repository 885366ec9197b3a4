"""ThreadPlatform abstract interface.

The operations the core consumes from the messaging platform. Every
failure surfaces as a classified PlatformError.
"""

from abc import ABC, abstractmethod

from threadwarden.platform.models import ThreadInfo


class ThreadPlatform(ABC):
    """Abstract messaging-platform client."""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Short identifier used in logs."""
        ...

    @abstractmethod
    async def open_thread(
        self,
        channel_id: str,
        message_id: str,
        name: str,
        auto_archive_minutes: int,
    ) -> str:
        """Open a thread from a message and return the thread id."""
        ...

    @abstractmethod
    async def delete_thread(self, thread_id: str, reason: str | None = None) -> None:
        """Destroy a thread."""
        ...

    @abstractmethod
    async def lock_thread(self, thread_id: str, reason: str | None = None) -> None:
        """Lock a thread so members can no longer post."""
        ...

    @abstractmethod
    async def archive_thread(self, thread_id: str, reason: str | None = None) -> None:
        """Archive a thread."""
        ...

    @abstractmethod
    async def close_thread(self, thread_id: str, reason: str | None = None) -> None:
        """Lock and archive a thread in one step, whatever its current state."""
        ...

    @abstractmethod
    async def fetch_thread(self, thread_id: str) -> ThreadInfo | None:
        """Fetch a thread; None when it no longer exists or is not a thread."""
        ...

    @abstractmethod
    async def remove_member(self, guild_id: str, user_id: str, reason: str) -> None:
        """Remove a member from the community."""
        ...

    @abstractmethod
    async def can_remove_members(self, guild_id: str) -> bool:
        """Whether the service account holds the member-removal capability."""
        ...

    @abstractmethod
    async def send_direct(self, user_id: str, text: str) -> None:
        """Send a direct message.

        Raises:
            DirectMessagesDisabled: If the user does not accept direct messages
        """
        ...

    @abstractmethod
    async def delete_message(self, channel_id: str, message_id: str) -> None:
        """Delete a message at its origin."""
        ...

    @abstractmethod
    async def post_log(
        self,
        channel_id: str,
        title: str,
        description: str,
        details: str | None = None,
        color: int | None = None,
    ) -> None:
        """Post a formatted notification to a channel."""
        ...

    @abstractmethod
    async def check_channel_access(self, channel_id: str) -> list[str]:
        """Return the names of required permissions missing in a channel."""
        ...

    def thread_link(self, guild_id: str, thread_id: str) -> str:
        """Build a user-facing link to a thread."""
        return f"{guild_id}/{thread_id}"

    async def health_check(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None
