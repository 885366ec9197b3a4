"""Configuration model exports.

    from threadwarden.config.models import PolicyConfig, StorageConfig
"""

from threadwarden.config.models.discord import DiscordConfig
from threadwarden.config.models.observability import (
    APIConfig,
    LoggingConfig,
    ObservabilityConfig,
)
from threadwarden.config.models.policy import PolicyConfig, SweeperConfig
from threadwarden.config.models.storage import StorageConfig

__all__ = [
    "APIConfig",
    "DiscordConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "PolicyConfig",
    "StorageConfig",
    "SweeperConfig",
]
