"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError

from pushbridge.config.models import BridgeConfig, ConfigError
from pushbridge.config.paths import get_config_path

# (section, key, environment variable)
SECRET_ENV_VARS = [
    ("server", "psk", "PSK"),
    ("pushover", "token", "PUSHOVER_TOKEN"),
    ("pushover", "user", "PUSHOVER_USER"),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.pushbridge/config.toml (or PUSHBRIDGE_HOME)
        Path("/etc/pushbridge/config.toml"),  # System-wide
    ]


def _set_secret_from_env(section: dict[str, Any], key: str, env_var: str) -> None:
    """Set a secret value from environment if not already set."""
    if section.get(key) is None:
        value = os.environ.get(env_var)
        if value:
            section[key] = SecretStr(value)


def _resolve_env_secrets(config: dict[str, Any]) -> dict[str, Any]:
    """Resolve secrets from environment variables where not set in config."""
    for parent_key, secret_key, env_var in SECRET_ENV_VARS:
        section = config.get(parent_key)
        if section is None:
            section = config[parent_key] = {}
        _set_secret_from_env(section, secret_key, env_var)
    return config


def find_config_path(path: Path | None = None) -> Path | None:
    """Locate the config file to use.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path

    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def load_config(path: Path | None = None) -> BridgeConfig:
    """Load configuration from TOML file plus environment.

    With no explicit path and no file in the default locations, defaults
    are used and secrets come only from the environment.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated BridgeConfig instance.

    Raises:
        FileNotFoundError: If an explicit config file is missing.
        ConfigError: If the config file is invalid.
    """
    config_path = find_config_path(path)

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env_secrets(raw_config)

    try:
        return BridgeConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def get_default_config() -> BridgeConfig:
    """Get a default configuration for development/testing."""
    return BridgeConfig()
