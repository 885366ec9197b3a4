"""Inbound event routing.

Filters platform events and hands them to the gate or the store. A failure
while handling one event is logged and reported to moderators; it never
propagates to the caller, so one bad event cannot stop the service.
"""

from threadwarden.gate.gate import AttemptGate, GateOutcome
from threadwarden.notifications.notifier import Notifier
from threadwarden.observability.logging import get_logger
from threadwarden.observability.metrics import EVENTS
from threadwarden.platform.models import MessageEvent, ThreadDeletedEvent
from threadwarden.threads.store import ThreadStore

logger = get_logger(__name__)


class EventRouter:
    """Dispatches message and thread-deleted events."""

    def __init__(
        self,
        gate: AttemptGate,
        store: ThreadStore,
        notifier: Notifier,
        managed_channel_id: str = "",
    ) -> None:
        """Initialize router.

        Args:
            gate: Attempt gate for managed-channel messages
            store: Thread store, for out-of-band deletions
            notifier: Moderator notifications
            managed_channel_id: Only messages from this channel are handled
                (empty accepts every channel, for local runs)
        """
        self._gate = gate
        self._store = store
        self._notifier = notifier
        self._managed_channel_id = managed_channel_id

    async def handle_message(self, event: MessageEvent) -> GateOutcome:
        outcome = self._filter(event)
        if outcome is None:
            try:
                outcome = await self._gate.handle_message(event)
            except Exception as e:
                logger.exception(
                    "message_handling_failed",
                    user_id=event.author_id,
                    message_id=event.message_id,
                    error=str(e),
                )
                await self._notifier.error(e, "message_handler")
                outcome = GateOutcome.FAILED

        EVENTS.labels(type="message", outcome=outcome.value).inc()
        return outcome

    def _filter(self, event: MessageEvent) -> GateOutcome | None:
        if event.author_is_bot:
            return GateOutcome.IGNORED
        if self._managed_channel_id and event.channel_id != self._managed_channel_id:
            return GateOutcome.IGNORED
        if not event.has_member:
            logger.error("member_info_missing", message_id=event.message_id)
            return GateOutcome.IGNORED
        return None

    async def handle_thread_deleted(self, event: ThreadDeletedEvent) -> bool:
        """Deactivate the record of a thread deleted on the platform.

        Returns:
            True if a tracked record was deactivated
        """
        try:
            record = await self._store.get_by_thread_id(event.thread_id)
            if record is None:
                logger.debug("untracked_thread_deleted", thread_id=event.thread_id)
                EVENTS.labels(type="thread_deleted", outcome="ignored").inc()
                return False

            changed = await self._store.deactivate(event.thread_id)
        except Exception as e:
            logger.exception("thread_delete_handling_failed", thread_id=event.thread_id)
            await self._notifier.error(e, "thread_delete_handler")
            EVENTS.labels(type="thread_deleted", outcome="failed").inc()
            return False

        logger.info(
            "thread_deleted",
            thread_id=event.thread_id,
            user_id=record.user_id,
            deactivated=changed,
        )
        await self._notifier.thread_deleted(event.thread_id)
        EVENTS.labels(
            type="thread_deleted", outcome="deactivated" if changed else "noop"
        ).inc()
        return changed
