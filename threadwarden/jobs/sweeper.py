"""Thread expiry sweeper.

Periodic job that closes threads past their time-to-live. Each expired
record is handled on its own:

1. Thread gone on the platform: deactivate locally ("missing")
2. Thread found: lock, archive, deactivate, notify ("closed")
3. Permanent platform fault: deactivate, the thread is unreachable for good
   ("abandoned")
4. Transient platform fault: leave the record for the next sweep
   ("retry_pending")
5. Anything else: log and leave the record ("failed")

Idempotent: closing an already closed thread and deactivating an inactive
record are both no-ops, so a sweep may be repeated at any time.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from threadwarden.notifications.notifier import Notifier
from threadwarden.observability.logging import get_logger
from threadwarden.observability.metrics import PLATFORM_ERRORS, SWEEP_LATENCY, THREADS_CLOSED
from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import PlatformError
from threadwarden.threads.models import UserThread, utc_now
from threadwarden.threads.store import ThreadStore

logger = get_logger(__name__)

OUTCOMES = ("closed", "missing", "abandoned", "retry_pending", "failed")


@dataclass
class SweepResult:
    """Output of one sweep."""

    examined: int = 0
    closed: int = 0
    missing: int = 0
    abandoned: int = 0
    retry_pending: int = 0
    failed: int = 0
    skipped: bool = False  # another sweep was in flight
    outcomes: dict[str, str] = field(default_factory=dict)  # thread_id -> outcome

    def record(self, thread_id: str, outcome: str) -> None:
        self.outcomes[thread_id] = outcome
        setattr(self, outcome, getattr(self, outcome) + 1)


class ExpirySweeper:
    """Closes expired threads on a fixed interval.

    start() runs one sweep right away and then one per interval. Sweeps never
    overlap; a sweep requested while another is running is skipped. stop()
    lets an in-flight sweep finish, up to shutdown_timeout_seconds.
    """

    JOB_NAME = "expire-threads"
    CLOSE_REASON = "Thread expired after 24 hours"

    def __init__(
        self,
        store: ThreadStore,
        platform: ThreadPlatform,
        notifier: Notifier,
        interval_seconds: float = 300.0,
        shutdown_timeout_seconds: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize sweeper.

        Args:
            store: Thread record store
            platform: Messaging platform client
            notifier: Moderator notifications
            interval_seconds: Seconds between sweeps
            shutdown_timeout_seconds: How long stop() waits for a running sweep
            clock: Current time source
        """
        self._store = store
        self._platform = platform
        self._notifier = notifier
        self._interval_seconds = interval_seconds
        self._shutdown_timeout_seconds = shutdown_timeout_seconds
        self._clock = clock
        self._sweep_lock = asyncio.Lock()
        self._stopping = asyncio.Event()
        self._loop_task: asyncio.Task | None = None
        self.sweep_count = 0
        self.last_result: SweepResult | None = None

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def is_sweeping(self) -> bool:
        return self._sweep_lock.locked()

    async def start(self) -> None:
        """Start the sweep loop in the background."""
        if self.is_running:
            logger.warning("sweeper_already_running")
            return

        self._stopping.clear()
        self._loop_task = asyncio.create_task(self._loop(), name=self.JOB_NAME)
        logger.info("sweeper_started", interval_seconds=self._interval_seconds)

    async def stop(self) -> None:
        """Stop scheduling sweeps and wait for the running one."""
        if self._loop_task is None:
            return

        self._stopping.set()
        try:
            await asyncio.wait_for(
                asyncio.shield(self._loop_task),
                timeout=self._shutdown_timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "sweeper_stop_timeout",
                timeout_seconds=self._shutdown_timeout_seconds,
            )
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
        finally:
            self._loop_task = None

        logger.info("sweeper_stopped", sweeps=self.sweep_count)

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.exception("sweep_failed", error=str(e))
                await self._notifier.error(e, "expiry_sweep")

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                pass

    async def run_once(self, now: datetime | None = None) -> SweepResult:
        """Run one sweep.

        Args:
            now: Reference time (clock when omitted)

        Returns:
            SweepResult with per-outcome counts, or skipped=True
        """
        if self._sweep_lock.locked():
            logger.info("sweep_skipped_in_flight")
            return SweepResult(skipped=True)

        async with self._sweep_lock:
            with SWEEP_LATENCY.time():
                result = await self._sweep(now or self._clock())
            self.sweep_count += 1
            self.last_result = result
            return result

    async def _sweep(self, now: datetime) -> SweepResult:
        expired = await self._store.list_expired(now)
        result = SweepResult(examined=len(expired))
        if not expired:
            logger.debug("no_expired_threads")
            return result

        logger.info("expired_threads_found", count=len(expired))
        for record in expired:
            outcome = await self._expire(record)
            result.record(record.thread_id, outcome)
            THREADS_CLOSED.labels(outcome=outcome).inc()

        logger.info(
            "sweep_completed",
            examined=result.examined,
            closed=result.closed,
            missing=result.missing,
            abandoned=result.abandoned,
            retry_pending=result.retry_pending,
            failed=result.failed,
        )
        return result

    async def _expire(self, record: UserThread) -> str:
        thread_id = record.thread_id
        try:
            return await self._close(thread_id)
        except Exception as e:
            logger.exception("expire_thread_failed", thread_id=thread_id, error=str(e))
            await self._notifier.error(e, f"expire_thread-{thread_id}")
            return "failed"

    async def _close(self, thread_id: str) -> str:
        try:
            thread = await self._platform.fetch_thread(thread_id)
            if thread is None:
                await self._store.deactivate(thread_id)
                logger.info("expired_thread_missing", thread_id=thread_id)
                return "missing"

            if not (thread.locked and thread.archived):
                await self._platform.close_thread(thread_id, reason=self.CLOSE_REASON)
            await self._store.deactivate(thread_id)
            logger.info("expired_thread_closed", thread_id=thread_id, name=thread.name)
            await self._notifier.thread_expired(thread_id, thread.name)
            return "closed"

        except PlatformError as e:
            PLATFORM_ERRORS.labels(
                operation=e.operation or "expire_thread", kind=e.kind.value
            ).inc()
            if e.is_permanent:
                await self._store.deactivate(thread_id)
                outcome = "abandoned"
            else:
                outcome = "retry_pending"
            logger.warning(
                "expire_thread_platform_error",
                thread_id=thread_id,
                outcome=outcome,
                reason=e.reason,
                error=str(e),
            )
            await self._notifier.error(e, f"expire_thread-{thread_id}")
            return outcome
