"""Reconciliation of stored threads against the platform."""

from threadwarden.notifications.notifier import Notifier
from threadwarden.observability.logging import get_logger
from threadwarden.observability.metrics import PLATFORM_ERRORS, RECONCILIATIONS
from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import PlatformError
from threadwarden.threads.models import UserThread
from threadwarden.threads.store import ThreadStore

logger = get_logger(__name__)


class ThreadReconciler:
    """Checks that a thread recorded as active is still open on the platform.

    Stale records (thread gone, archived or locked, or a permanent fault) are
    deactivated. A transient fault leaves the record active: a briefly
    unreachable platform must not cause a second thread to be opened.
    """

    def __init__(
        self,
        store: ThreadStore,
        platform: ThreadPlatform,
        notifier: Notifier,
    ) -> None:
        self._store = store
        self._platform = platform
        self._notifier = notifier

    async def verify(self, record: UserThread) -> bool:
        """Return True if the record's thread is still active.

        Deactivates and reports a stale record in one step. Callers holding
        a per-user lock use check() and report after releasing it.

        Args:
            record: Active record to check

        Returns:
            False when the record was found stale and deactivated
        """
        stale_reason = await self.check(record)
        if stale_reason is None:
            return True
        await self.report_stale(record, stale_reason)
        return False

    async def check(self, record: UserThread) -> str | None:
        """Deactivate the record if stale, without notifying.

        Returns:
            Why the record was deactivated, or None while it is still active
        """
        try:
            thread = await self._platform.fetch_thread(record.thread_id)
        except PlatformError as e:
            PLATFORM_ERRORS.labels(operation="fetch_thread", kind=e.kind.value).inc()
            if e.is_transient:
                logger.warning(
                    "reconcile_transient_fault",
                    user_id=record.user_id,
                    thread_id=record.thread_id,
                    reason=e.reason,
                    error=str(e),
                )
                RECONCILIATIONS.labels(result="assumed_active").inc()
                return None
            return await self._deactivate(record, reason=e.reason or "permanent_fault")

        if thread is None:
            return await self._deactivate(record, reason="not_found")
        if not thread.is_open:
            return await self._deactivate(
                record, reason="archived" if thread.archived else "locked"
            )

        RECONCILIATIONS.labels(result="active").inc()
        return None

    async def report_stale(self, record: UserThread, reason: str) -> None:
        await self._notifier.thread_deactivated(record.thread_id, record.user_id, reason)

    async def _deactivate(self, record: UserThread, reason: str) -> str:
        await self._store.deactivate(record.thread_id)
        RECONCILIATIONS.labels(result="stale").inc()
        logger.info(
            "stale_thread_deactivated",
            user_id=record.user_id,
            thread_id=record.thread_id,
            reason=reason,
        )
        return reason
