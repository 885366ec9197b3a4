"""Shared test fixtures for the threadwarden test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from threadwarden.gate.gate import AttemptGate
from threadwarden.gate.policy import AttemptPolicy
from threadwarden.notifications.notifier import Notifier
from threadwarden.platform.inmemory import InMemoryPlatform
from threadwarden.platform.models import MessageEvent
from threadwarden.threads.stores.inmemory import InMemoryThreadStore

from tests.factories.fakes import (
    CHANNEL_ID,
    EXEMPT_ROLE_ID,
    GUILD_ID,
    FakeClock,
    RecordingSink,
)


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            original = self.original_env[key]
            if original is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original


@pytest.fixture
def env_override() -> Callable[[dict[str, str]], EnvOverrideContext]:
    """Temporarily set environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"THREADWARDEN_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    return _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from threadwarden.config import get_settings
    from threadwarden.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults so no test inherits a captured stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryThreadStore:
    return InMemoryThreadStore(clock=clock)


@pytest.fixture
def platform() -> InMemoryPlatform:
    return InMemoryPlatform(guild_id=GUILD_ID)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def notifier(sink: RecordingSink) -> Notifier:
    return Notifier(sink)


@pytest.fixture
def policy() -> AttemptPolicy:
    return AttemptPolicy(exempt_role_ids=frozenset({EXEMPT_ROLE_ID}))


@pytest.fixture
def gate(
    store: InMemoryThreadStore,
    platform: InMemoryPlatform,
    notifier: Notifier,
    policy: AttemptPolicy,
) -> AttemptGate:
    return AttemptGate(store, platform, notifier, policy=policy)


@pytest.fixture
def make_message() -> Callable[..., MessageEvent]:
    """Factory for message events in the managed channel."""
    counter = iter(range(500000000000000001, 600000000000000000))

    def _make(author_id: str = "700000000000000001", **overrides: Any) -> MessageEvent:
        data: dict[str, Any] = {
            "message_id": str(next(counter)),
            "channel_id": CHANNEL_ID,
            "guild_id": GUILD_ID,
            "author_id": author_id,
            "author_name": f"user{author_id[-3:]}",
        }
        data.update(overrides)
        return MessageEvent(**data)

    return _make
