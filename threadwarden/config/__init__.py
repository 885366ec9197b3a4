"""Configuration loading for threadwarden.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from threadwarden.config import get_settings

    settings = get_settings()
    threshold = settings.policy.kick_threshold
"""

from functools import lru_cache

from pydantic import ValidationError
from pydantic_settings import SettingsError

from threadwarden.config.loader import load_config
from threadwarden.config.settings import ConfigurationError, Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{THREADWARDEN_ENV}.toml (environment overrides)
    4. THREADWARDEN_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process; configuration
    is not hot-reloaded.

    Raises:
        ConfigurationError: If a required value is missing or invalid
    """
    config_dict = load_config()
    set_toml_config(config_dict)

    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration:\n{e}") from e
    except SettingsError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["ConfigurationError", "get_settings", "reload_settings", "Settings"]
