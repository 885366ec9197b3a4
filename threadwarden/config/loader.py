"""Locating and reading the TOML configuration layers.

Two layers exist: config/default.toml and config/{THREADWARDEN_ENV}.toml.
Either may be absent; a file that exists but does not parse is fatal.
"""

import os
import re
import tomllib
from pathlib import Path
from typing import Any

from threadwarden.config.settings import ConfigurationError

CONFIG_DIR_VAR = "THREADWARDEN_CONFIG_DIR"
ENVIRONMENT_VAR = "THREADWARDEN_ENV"
DEFAULT_ENVIRONMENT = "development"

# Environment names become file names
ENVIRONMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Directory holding the TOML layers.

    THREADWARDEN_CONFIG_DIR wins; otherwise ./config, then the config/
    directory shipped next to the package.

    Raises:
        ConfigurationError: If THREADWARDEN_CONFIG_DIR is not a directory
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise ConfigurationError(f"{CONFIG_DIR_VAR} is not a directory: {override}")
        return path

    for base in (Path.cwd(), PROJECT_ROOT):
        candidate = base / "config"
        if candidate.is_dir():
            return candidate
    return Path.cwd() / "config"


def get_environment() -> str:
    """Deployment environment name from THREADWARDEN_ENV."""
    environment = os.environ.get(ENVIRONMENT_VAR, "").strip() or DEFAULT_ENVIRONMENT
    if not ENVIRONMENT_PATTERN.match(environment):
        raise ConfigurationError(
            f"{ENVIRONMENT_VAR} must be letters, digits, '_' or '-': {environment!r}"
        )
    return environment


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Existing layer files, lowest precedence first."""
    names = ["default.toml"]
    if environment != "default":
        names.append(f"{environment}.toml")
    return [config_dir / name for name in names if (config_dir / name).is_file()]


def read_layer(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def merge_layers(lower: dict[str, Any], upper: dict[str, Any]) -> dict[str, Any]:
    """Overlay upper onto lower; tables merge key by key, anything else is replaced."""
    merged = dict(lower)
    for key, value in upper.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_layers(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Read and merge every layer present.

    Args:
        config_dir: Directory to read (defaults to get_config_dir())
        environment: Environment layer to apply (defaults to get_environment())

    Returns:
        Merged configuration, empty when no layer exists
    """
    config_dir = config_dir or get_config_dir()
    environment = environment or get_environment()

    config: dict[str, Any] = {}
    for path in config_layers(config_dir, environment):
        config = merge_layers(config, read_layer(path))
    return config
