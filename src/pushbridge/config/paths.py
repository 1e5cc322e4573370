"""Centralized path management for pushbridge.

All state (config, queue snapshot) is stored under a single base directory.
The base directory can be overridden with the PUSHBRIDGE_HOME environment
variable.

Default location: ~/.pushbridge
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "PUSHBRIDGE_HOME"


@lru_cache(maxsize=1)
def get_pushbridge_home() -> Path:
    """Get the base directory for all pushbridge data.

    Resolution order:
    1. PUSHBRIDGE_HOME environment variable (if set)
    2. ~/.pushbridge

    Returns:
        Path to the home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".pushbridge"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_pushbridge_home() / "config.toml"


def get_queue_path() -> Path:
    """Get the default queue snapshot path."""
    return get_pushbridge_home() / "message_db.json"
