"""Attempt gate: the per-message decision.

For each message in the managed channel the gate either opens the author's
thread or routes the post as a duplicate (delete, count, direct message,
escalate). Thread opening is serialized per user so concurrent first
contacts produce exactly one thread.
"""

from enum import Enum

from threadwarden.gate.errors import ThreadOpenError
from threadwarden.gate.locks import UserLockArena
from threadwarden.gate.policy import AttemptPolicy
from threadwarden.gate.reconciler import ThreadReconciler
from threadwarden.notifications.notifier import Notifier
from threadwarden.observability.logging import get_logger
from threadwarden.observability.metrics import (
    DUPLICATE_ATTEMPTS,
    MEMBERS_REMOVED,
    PLATFORM_ERRORS,
    THREADS_CREATED,
)
from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import DirectMessagesDisabled, PlatformError
from threadwarden.platform.models import MessageEvent
from threadwarden.threads.models import UserThread
from threadwarden.threads.store import ThreadStore

logger = get_logger(__name__)


class GateOutcome(str, Enum):
    """What the gate did with a message."""

    CREATED = "created"  # a new thread was opened
    DUPLICATE = "duplicate"  # post removed and counted
    REMOVED = "removed"  # post removed and the author removed from the community
    EXEMPT = "exempt"  # author holds an exempt role
    IGNORED = "ignored"  # filtered before reaching the gate
    FAILED = "failed"  # processing raised; logged and reported


class AttemptGate:
    """Decides between opening a thread and routing a duplicate post."""

    def __init__(
        self,
        store: ThreadStore,
        platform: ThreadPlatform,
        notifier: Notifier,
        policy: AttemptPolicy | None = None,
        locks: UserLockArena | None = None,
        reconciler: ThreadReconciler | None = None,
        auto_archive_minutes: int = 1440,
    ) -> None:
        """Initialize gate.

        Args:
            store: Thread record store
            platform: Messaging platform client
            notifier: Moderator notifications
            policy: Escalation policy (defaults 7 / 10)
            locks: Per-user lock arena, shared with anything else opening threads
            reconciler: Stale-record checker (built from store/platform when omitted)
            auto_archive_minutes: Platform-side inactivity archive for new threads
        """
        self._store = store
        self._platform = platform
        self._notifier = notifier
        self._policy = policy or AttemptPolicy()
        self._locks = locks or UserLockArena()
        self._reconciler = reconciler or ThreadReconciler(store, platform, notifier)
        self._auto_archive_minutes = auto_archive_minutes

    @property
    def policy(self) -> AttemptPolicy:
        return self._policy

    async def handle_message(self, event: MessageEvent) -> GateOutcome:
        """Process one message from the managed channel.

        Raises:
            PlatformError: If the thread could not be opened
            ThreadOpenError: If the opened thread could not be recorded
            StoreError: If the store is unreachable
        """
        if self._policy.is_exempt(event.role_ids):
            logger.debug("exempt_author", user_id=event.author_id)
            return GateOutcome.EXEMPT

        # Notifications go out after the user's lock is released
        stale: tuple[UserThread, str] | None = None
        created: str | None = None
        try:
            async with self._locks.acquire(event.author_id):
                record = await self._store.get_active(event.author_id)
                if record is not None:
                    stale_reason = await self._reconciler.check(record)
                    if stale_reason is not None:
                        stale = (record, stale_reason)
                        record = None

                if record is None:
                    created = await self._open_thread(event)
                else:
                    thread_id = record.thread_id
        finally:
            if stale is not None:
                await self._reconciler.report_stale(*stale)

        if created is not None:
            await self._notifier.thread_created(
                event.author_id, event.visible_name, created, self._thread_name(event)
            )
            return GateOutcome.CREATED

        return await self._route_duplicate(event, thread_id)

    @staticmethod
    def _thread_name(event: MessageEvent) -> str:
        return f"{event.visible_name}'s Support Thread"

    async def _open_thread(self, event: MessageEvent) -> str:
        name = self._thread_name(event)
        try:
            thread_id = await self._platform.open_thread(
                event.channel_id,
                event.message_id,
                name,
                self._auto_archive_minutes,
            )
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="open_thread", kind=e.kind.value).inc()
            logger.error(
                "thread_open_failed",
                user_id=event.author_id,
                reason=e.reason,
                error=str(e),
            )
            raise

        try:
            await self._store.create(event.author_id, thread_id, event.channel_id)
        except Exception as e:
            logger.error(
                "thread_record_failed",
                user_id=event.author_id,
                thread_id=thread_id,
                error=str(e),
            )
            compensated = await self._delete_orphan(thread_id)
            raise ThreadOpenError(
                f"Failed to record thread {thread_id} for user {event.author_id}",
                user_id=event.author_id,
                thread_id=thread_id,
                cause=e,
                compensated=compensated,
            ) from e

        THREADS_CREATED.inc()
        logger.info(
            "thread_created",
            user_id=event.author_id,
            user_name=event.visible_name,
            thread_id=thread_id,
        )
        return thread_id

    async def _delete_orphan(self, thread_id: str) -> bool:
        try:
            await self._platform.delete_thread(thread_id, reason="Database insertion failed")
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="delete_thread", kind=e.kind.value).inc()
            logger.error("orphan_thread_delete_failed", thread_id=thread_id, error=str(e))
            return False
        logger.info("orphan_thread_deleted", thread_id=thread_id)
        return True

    async def _route_duplicate(self, event: MessageEvent, thread_id: str) -> GateOutcome:
        user_id = event.author_id

        try:
            await self._platform.delete_message(event.channel_id, event.message_id)
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="delete_message", kind=e.kind.value).inc()
            logger.warning(
                "duplicate_delete_failed",
                user_id=user_id,
                message_id=event.message_id,
                reason=e.reason,
                error=str(e),
            )
            await self._notifier.error(e, "route_duplicate")

        attempts = await self._store.increment_attempts(user_id)
        DUPLICATE_ATTEMPTS.inc()
        link = self._platform.thread_link(event.guild_id, thread_id)

        try:
            await self._platform.send_direct(
                user_id, self._policy.direct_message(link, attempts)
            )
        except DirectMessagesDisabled:
            logger.info("direct_messages_disabled", user_id=user_id)
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="send_direct", kind=e.kind.value).inc()
            logger.warning("direct_message_failed", user_id=user_id, error=str(e))

        await self._notifier.message_deleted(user_id, event.visible_name, link, attempts)
        logger.info(
            "duplicate_routed",
            user_id=user_id,
            thread_id=thread_id,
            attempts=attempts,
            kick_threshold=self._policy.kick_threshold,
        )

        if self._policy.should_remove(attempts):
            if await self._remove_member(event, attempts):
                return GateOutcome.REMOVED
        return GateOutcome.DUPLICATE

    async def _remove_member(self, event: MessageEvent, attempts: int) -> bool:
        user_id = event.author_id

        try:
            permitted = await self._platform.can_remove_members(event.guild_id)
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="can_remove_members", kind=e.kind.value).inc()
            logger.warning("removal_capability_check_failed", error=str(e))
            permitted = False

        if not permitted:
            MEMBERS_REMOVED.labels(result="not_permitted").inc()
            logger.error("member_removal_not_permitted", user_id=user_id, attempts=attempts)
            await self._notifier.error("Missing KICK_MEMBERS permission", "remove_member")
            return False

        try:
            await self._platform.remove_member(
                event.guild_id, user_id, self._policy.removal_reason
            )
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="remove_member", kind=e.kind.value).inc()
            MEMBERS_REMOVED.labels(result="failed").inc()
            logger.error("member_removal_failed", user_id=user_id, error=str(e))
            await self._notifier.error(e, "remove_member")
            return False

        MEMBERS_REMOVED.labels(result="removed").inc()
        logger.info("member_removed", user_id=user_id, attempts=attempts)
        await self._notifier.user_removed(user_id, event.visible_name, attempts)
        return True
