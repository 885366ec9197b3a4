"""Test factories and fakes."""

from tests.factories.fakes import (
    CHANNEL_ID,
    EXEMPT_ROLE_ID,
    GUILD_ID,
    LOG_CHANNEL_ID,
    FakeClock,
    RecordingSink,
)

__all__ = [
    "CHANNEL_ID",
    "EXEMPT_ROLE_ID",
    "GUILD_ID",
    "LOG_CHANNEL_ID",
    "FakeClock",
    "RecordingSink",
]
