"""Configuration models using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr

from pushbridge.config.paths import get_queue_path
from pushbridge.notify.pushover import DEFAULT_TIMEOUT, PUSHOVER_API_URL
from pushbridge.queue.scheduler import DEFAULT_DRIFT_TOLERANCE, DEFAULT_UPDATE_INTERVAL
from pushbridge.queue.types import (
    DEFAULT_MAX_KEY_LENGTH,
    DEFAULT_MAX_MESSAGE_LENGTH,
    DEFAULT_MAX_TITLE_LENGTH,
    MessageLimits,
)


class ConfigError(Exception):
    """Configuration error."""

    pass


class ServerConfig(BaseModel):
    """Configuration for HTTP server.

    ``psk`` is the pre-shared key callers send as a bearer token when
    queueing messages.
    """

    host: str = "127.0.0.1"
    port: int = 1414
    psk: SecretStr | None = None


class PushoverConfig(BaseModel):
    """Configuration for Pushover delivery."""

    token: SecretStr | None = None
    user: SecretStr | None = None
    api_url: str = PUSHOVER_API_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)


class SchedulerConfig(BaseModel):
    """Reconciliation cadence, in seconds."""

    update_interval: float = Field(default=DEFAULT_UPDATE_INTERVAL, gt=0)
    drift_tolerance: float = Field(default=DEFAULT_DRIFT_TOLERANCE, ge=0)


class LimitsConfig(BaseModel):
    """Field length limits for queued messages."""

    max_key_length: int = Field(default=DEFAULT_MAX_KEY_LENGTH, gt=0)
    max_message_length: int = Field(default=DEFAULT_MAX_MESSAGE_LENGTH, gt=0)
    max_title_length: int = Field(default=DEFAULT_MAX_TITLE_LENGTH, ge=0)

    def to_limits(self) -> MessageLimits:
        return MessageLimits(
            max_key_length=self.max_key_length,
            max_message_length=self.max_message_length,
            max_title_length=self.max_title_length,
        )


class StorageConfig(BaseModel):
    """Where the queue snapshot lives."""

    path: Path = Field(default_factory=get_queue_path)


class BridgeConfig(BaseModel):
    """Root configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    pushover: PushoverConfig = Field(default_factory=PushoverConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    def require_secrets(self) -> None:
        """Check that everything needed to serve is configured.

        Raises:
            ConfigError: Naming the first missing secret.
        """
        if self.server.psk is None or not self.server.psk.get_secret_value():
            raise ConfigError("no PSK configured (set PSK or server.psk)")
        if self.pushover.token is None or not self.pushover.token.get_secret_value():
            raise ConfigError(
                "no Pushover token configured (set PUSHOVER_TOKEN or pushover.token)"
            )
        if self.pushover.user is None or not self.pushover.user.get_secret_value():
            raise ConfigError(
                "no Pushover user configured (set PUSHOVER_USER or pushover.user)"
            )
