"""Configuration module."""

from pushbridge.config.loader import get_default_config, load_config
from pushbridge.config.models import (
    BridgeConfig,
    ConfigError,
    LimitsConfig,
    PushoverConfig,
    SchedulerConfig,
    ServerConfig,
    StorageConfig,
)
from pushbridge.config.paths import (
    get_config_path,
    get_pushbridge_home,
    get_queue_path,
)

__all__ = [
    "BridgeConfig",
    "ConfigError",
    "LimitsConfig",
    "PushoverConfig",
    "SchedulerConfig",
    "ServerConfig",
    "StorageConfig",
    "get_config_path",
    "get_default_config",
    "get_pushbridge_home",
    "get_queue_path",
    "load_config",
]
