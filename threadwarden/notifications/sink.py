"""Notification sinks.

A sink delivers one notification somewhere: the moderators' logging channel
or the structured log. Sinks may raise; the Notifier decides what a failed
delivery means.
"""

from abc import ABC, abstractmethod
from enum import Enum

from threadwarden.observability.logging import get_logger
from threadwarden.platform.client import ThreadPlatform

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    """Kinds of moderator notifications."""

    THREAD_CREATED = "thread_created"
    MESSAGE_DELETED = "message_deleted"
    USER_REMOVED = "user_removed"
    THREAD_EXPIRED = "thread_expired"
    THREAD_DELETED = "thread_deleted"
    THREAD_DEACTIVATED = "thread_deactivated"
    ERROR = "error"
    INFO = "info"

    @property
    def title(self) -> str:
        return self.name.replace("_", " ")


KIND_COLORS: dict[NotificationKind, int] = {
    NotificationKind.THREAD_CREATED: 0x00FF00,
    NotificationKind.MESSAGE_DELETED: 0xFFA500,
    NotificationKind.USER_REMOVED: 0xFF0000,
    NotificationKind.THREAD_EXPIRED: 0x808080,
    NotificationKind.THREAD_DELETED: 0x808080,
    NotificationKind.THREAD_DEACTIVATED: 0x808080,
    NotificationKind.ERROR: 0xFF0000,
    NotificationKind.INFO: 0x0099FF,
}


class NotificationSink(ABC):
    """Destination for moderator notifications."""

    @abstractmethod
    async def emit(
        self,
        kind: NotificationKind,
        summary: str,
        detail: str | None = None,
    ) -> None:
        """Deliver a notification."""
        ...


class LogNotificationSink(NotificationSink):
    """Writes notifications to the structured log."""

    async def emit(
        self,
        kind: NotificationKind,
        summary: str,
        detail: str | None = None,
    ) -> None:
        log = logger.error if kind is NotificationKind.ERROR else logger.info
        log("notification", kind=kind.value, summary=summary, detail=detail)


class ChannelNotificationSink(NotificationSink):
    """Posts notifications to a platform channel.

    Falls back to another sink (the structured log by default) when the
    channel post fails, so a notification is never silently lost.
    """

    def __init__(
        self,
        platform: ThreadPlatform,
        channel_id: str,
        fallback: NotificationSink | None = None,
    ) -> None:
        self._platform = platform
        self._channel_id = channel_id
        self._fallback = fallback or LogNotificationSink()

    async def emit(
        self,
        kind: NotificationKind,
        summary: str,
        detail: str | None = None,
    ) -> None:
        try:
            await self._platform.post_log(
                self._channel_id,
                title=kind.title,
                description=summary,
                details=detail,
                color=KIND_COLORS[kind],
            )
        except Exception as e:
            logger.warning(
                "notification_channel_post_failed",
                channel_id=self._channel_id,
                kind=kind.value,
                error=str(e),
            )
            await self._fallback.emit(kind, summary, detail)
