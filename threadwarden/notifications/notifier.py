"""Notifier facade.

Builds the moderator-facing text for every state transition and hands it to
a sink. Delivery never fails the caller: sink errors are logged and dropped.
"""

import traceback

from threadwarden.notifications.sink import (
    LogNotificationSink,
    NotificationKind,
    NotificationSink,
)
from threadwarden.observability.logging import get_logger

logger = get_logger(__name__)


class Notifier:
    """Moderator notifications for thread lifecycle events."""

    def __init__(self, sink: NotificationSink | None = None, kick_threshold: int = 10) -> None:
        """Initialize notifier.

        Args:
            sink: Delivery target (structured log when omitted)
            kick_threshold: Shown as the attempt ceiling in duplicate notices
        """
        self._sink = sink or LogNotificationSink()
        self._kick_threshold = kick_threshold

    async def notify(
        self,
        kind: NotificationKind,
        summary: str,
        detail: str | None = None,
    ) -> None:
        try:
            await self._sink.emit(kind, summary, detail)
        except Exception as e:
            logger.warning(
                "notification_dropped",
                kind=kind.value,
                summary=summary,
                error=str(e),
            )

    async def thread_created(
        self, user_id: str, user_name: str, thread_id: str, thread_name: str
    ) -> None:
        await self.notify(
            NotificationKind.THREAD_CREATED,
            f"New support thread created for <@{user_id}>",
            f"**User:** {user_name} ({user_id})\n"
            f"**Thread:** {thread_name}\n"
            f"**Thread ID:** {thread_id}",
        )

    async def message_deleted(
        self, user_id: str, user_name: str, thread_link: str, attempt_count: int
    ) -> None:
        await self.notify(
            NotificationKind.MESSAGE_DELETED,
            f"Message deleted from <@{user_id}>",
            f"**User:** {user_name} ({user_id})\n"
            f"**Active Thread:** {thread_link}\n"
            f"**Attempts:** {attempt_count}/{self._kick_threshold}",
        )

    async def user_removed(self, user_id: str, user_name: str, attempt_count: int) -> None:
        await self.notify(
            NotificationKind.USER_REMOVED,
            f"User <@{user_id}> removed for excessive posting attempts",
            f"**User:** {user_name} ({user_id})\n**Attempts:** {attempt_count}",
        )

    async def thread_expired(self, thread_id: str, thread_name: str) -> None:
        await self.notify(
            NotificationKind.THREAD_EXPIRED,
            "Thread expired and closed after 24 hours",
            f"**Thread:** {thread_name}\n**Thread ID:** {thread_id}",
        )

    async def thread_deleted(self, thread_id: str) -> None:
        await self.notify(
            NotificationKind.THREAD_DELETED,
            "Thread manually deleted",
            f"**Thread ID:** {thread_id}",
        )

    async def thread_deactivated(self, thread_id: str, user_id: str, reason: str) -> None:
        await self.notify(
            NotificationKind.THREAD_DEACTIVATED,
            f"Stale thread record for <@{user_id}> deactivated",
            f"**Thread ID:** {thread_id}\n**Reason:** {reason}",
        )

    async def error(self, error: BaseException | str, context: str) -> None:
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            stack = "".join(traceback.format_exception(error))[:1000]
            detail = f"**Error:** {message}\n**Stack:**\n```\n{stack}\n```"
        else:
            detail = f"**Error:** {error}"
        await self.notify(NotificationKind.ERROR, f"Error occurred in {context}", detail)

    async def info(self, message: str, detail: str | None = None) -> None:
        await self.notify(NotificationKind.INFO, message, detail)
