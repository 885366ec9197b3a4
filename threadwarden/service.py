"""Service wiring and lifecycle.

Builds the store, platform client, notifier, gate, router and sweeper from
settings, and owns their startup and shutdown order.
"""

from datetime import timedelta

from threadwarden.config.settings import ConfigurationError, Settings
from threadwarden.db.pool import PostgresPool
from threadwarden.events import EventRouter
from threadwarden.gate.gate import AttemptGate
from threadwarden.gate.locks import UserLockArena
from threadwarden.gate.policy import AttemptPolicy
from threadwarden.jobs.sweeper import ExpirySweeper
from threadwarden.notifications.notifier import Notifier
from threadwarden.notifications.sink import (
    ChannelNotificationSink,
    LogNotificationSink,
    NotificationSink,
)
from threadwarden.observability.logging import get_logger
from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import PlatformError
from threadwarden.threads.store import ThreadStore
from threadwarden.threads.stores.inmemory import InMemoryThreadStore
from threadwarden.threads.stores.postgres import PostgresThreadStore

logger = get_logger(__name__)


def build_store(settings: Settings) -> ThreadStore:
    ttl = timedelta(hours=settings.policy.ttl_hours)
    storage = settings.storage
    if storage.backend == "inmemory":
        return InMemoryThreadStore(ttl=ttl)

    return PostgresThreadStore(PostgresPool.from_config(storage), ttl=ttl)


def build_platform(settings: Settings) -> ThreadPlatform:
    discord = settings.discord
    if discord.backend == "inmemory":
        from threadwarden.platform.inmemory import InMemoryPlatform

        return InMemoryPlatform(guild_id=discord.guild_id or "100000000000000000")

    from threadwarden.platform.discord import DiscordRestPlatform

    if discord.token is None:
        raise ConfigurationError("discord.token is required when discord.backend is 'discord'")
    return DiscordRestPlatform(
        token=discord.token.get_secret_value(),
        api_base_url=discord.api_base_url,
        timeout=discord.request_timeout_seconds,
    )


class ThreadWardenService:
    """The running service: gate, router and sweeper over one store and platform."""

    def __init__(
        self,
        settings: Settings,
        store: ThreadStore,
        platform: ThreadPlatform,
        notifier: Notifier | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.platform = platform

        if notifier is None:
            sink: NotificationSink = LogNotificationSink()
            if settings.discord.logging_channel_id:
                sink = ChannelNotificationSink(platform, settings.discord.logging_channel_id)
            notifier = Notifier(sink, kick_threshold=settings.policy.kick_threshold)
        self.notifier = notifier

        self.gate = AttemptGate(
            store,
            platform,
            notifier,
            policy=AttemptPolicy.from_config(settings.policy),
            locks=UserLockArena(),
            auto_archive_minutes=settings.discord.thread_auto_archive_minutes,
        )
        self.router = EventRouter(
            self.gate,
            store,
            notifier,
            managed_channel_id=settings.discord.managed_channel_id,
        )
        self.sweeper = ExpirySweeper(
            store,
            platform,
            notifier,
            interval_seconds=settings.sweeper.interval_seconds,
            shutdown_timeout_seconds=settings.sweeper.shutdown_timeout_seconds,
        )
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ThreadWardenService":
        return cls(settings, build_store(settings), build_platform(settings))

    @property
    def is_started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Start the service.

        Raises:
            StoreError: If the store is unreachable or the schema cannot be created
        """
        if self._started:
            return

        await self.store.ensure_schema()
        await self._check_platform_access()

        if self.settings.sweeper.enabled:
            await self.sweeper.start()
        else:
            logger.info("sweeper_disabled")

        self._started = True
        logger.info(
            "service_started",
            platform=self.platform.platform_name,
            storage=self.settings.storage.backend,
        )
        await self.notifier.info(
            "Thread warden started",
            f"**Platform:** {self.platform.platform_name}\n"
            f"**Sweep interval:** {self.settings.sweeper.interval_seconds:g}s",
        )

    async def _check_platform_access(self) -> None:
        """Warn about missing channel permissions and kick capability."""
        discord = self.settings.discord
        channels = {
            "managed": discord.managed_channel_id,
            "logging": discord.logging_channel_id,
        }
        for role, channel_id in channels.items():
            if not channel_id:
                continue
            try:
                missing = await self.platform.check_channel_access(channel_id)
            except PlatformError as e:
                logger.warning(
                    "channel_access_check_failed",
                    channel=role,
                    channel_id=channel_id,
                    error=str(e),
                )
                continue
            if missing:
                logger.warning(
                    "channel_permissions_missing",
                    channel=role,
                    channel_id=channel_id,
                    missing=missing,
                )

        if not discord.guild_id:
            return
        try:
            can_remove = await self.platform.can_remove_members(discord.guild_id)
        except PlatformError as e:
            logger.warning("kick_capability_check_failed", error=str(e))
            return
        if not can_remove:
            logger.warning("kick_capability_missing", guild_id=discord.guild_id)

    async def stop(self) -> None:
        """Stop the sweeper and release platform and store resources."""
        if self._started:
            await self.sweeper.stop()
            await self.notifier.info("Thread warden stopping")
            self._started = False

        await self.platform.aclose()
        await self.store.close()
        logger.info("service_stopped")

    async def health(self) -> dict[str, bool]:
        return {
            "store": await self.store.health_check(),
            "platform": await self.platform.health_check(),
            "sweeper": self.sweeper.is_running or not self.settings.sweeper.enabled,
        }
