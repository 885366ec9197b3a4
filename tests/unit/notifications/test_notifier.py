"""Tests for notification sinks and the Notifier facade."""

from unittest.mock import AsyncMock

import pytest

from threadwarden.notifications.notifier import Notifier
from threadwarden.notifications.sink import (
    KIND_COLORS,
    ChannelNotificationSink,
    NotificationKind,
)
from threadwarden.platform.errors import FaultKind, PlatformError
from threadwarden.platform.inmemory import InMemoryPlatform

from tests.factories.fakes import LOG_CHANNEL_ID, RecordingSink


class TestNotifier:
    @pytest.mark.asyncio
    async def test_thread_created(self, notifier: Notifier, sink: RecordingSink) -> None:
        await notifier.thread_created(
            "700000000000000001", "ana", "900000000000000001", "ana's Support Thread"
        )

        kind, summary, detail = sink.notifications[0]
        assert kind is NotificationKind.THREAD_CREATED
        assert summary == "New support thread created for <@700000000000000001>"
        assert detail is not None
        assert "**Thread ID:** 900000000000000001" in detail

    @pytest.mark.asyncio
    async def test_message_deleted_shows_ceiling(self, sink: RecordingSink) -> None:
        notifier = Notifier(sink, kick_threshold=12)

        await notifier.message_deleted("700000000000000001", "ana", "https://link", 3)

        _, _, detail = sink.notifications[0]
        assert detail is not None
        assert "**Attempts:** 3/12" in detail
        assert "**Active Thread:** https://link" in detail

    @pytest.mark.asyncio
    async def test_error_includes_message_and_stack(
        self, notifier: Notifier, sink: RecordingSink
    ) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            await notifier.error(e, "route_duplicate")

        kind, summary, detail = sink.notifications[0]
        assert kind is NotificationKind.ERROR
        assert summary == "Error occurred in route_duplicate"
        assert detail is not None
        assert "**Error:** boom" in detail
        assert "RuntimeError" in detail

    @pytest.mark.asyncio
    async def test_error_from_string(self, notifier: Notifier, sink: RecordingSink) -> None:
        await notifier.error("Missing KICK_MEMBERS permission", "remove_member")

        _, _, detail = sink.notifications[0]
        assert detail == "**Error:** Missing KICK_MEMBERS permission"

    @pytest.mark.asyncio
    async def test_sink_failures_are_swallowed(self) -> None:
        sink = AsyncMock()
        sink.emit.side_effect = RuntimeError("sink down")
        notifier = Notifier(sink)

        await notifier.info("still fine")

        sink.emit.assert_awaited_once()


class TestChannelNotificationSink:
    @pytest.mark.asyncio
    async def test_posts_to_logging_channel(self, platform: InMemoryPlatform) -> None:
        sink = ChannelNotificationSink(platform, LOG_CHANNEL_ID)

        await sink.emit(NotificationKind.USER_REMOVED, "User removed", "**Attempts:** 11")

        log = platform.state.logs[0]
        assert log.channel_id == LOG_CHANNEL_ID
        assert log.title == "USER REMOVED"
        assert log.description == "User removed"
        assert log.details == "**Attempts:** 11"
        assert log.color == KIND_COLORS[NotificationKind.USER_REMOVED]

    @pytest.mark.asyncio
    async def test_falls_back_when_post_fails(self, platform: InMemoryPlatform) -> None:
        fallback = RecordingSink()
        sink = ChannelNotificationSink(platform, LOG_CHANNEL_ID, fallback=fallback)
        platform.fail_next(
            "post_log",
            PlatformError("missing access", FaultKind.PERMANENT, reason="missing_access"),
        )

        await sink.emit(NotificationKind.INFO, "Started")

        assert platform.state.logs == []
        assert fallback.notifications == [(NotificationKind.INFO, "Started", None)]

    def test_every_kind_has_a_color(self) -> None:
        assert set(KIND_COLORS) == set(NotificationKind)
