"""Shared test fixtures and factories."""

import asyncio
from pathlib import Path

import pytest

from pushbridge.config.models import BridgeConfig, PushoverConfig, ServerConfig
from pushbridge.queue import MessageStore, QueuedMessage, QueuePersistence, Scheduler

# Fixed wall-clock start for deterministic tests (2026-01-01T00:00:00Z)
START_TIME = 1_767_225_600.0


class FakeClock:
    """Controllable wall clock returning epoch seconds."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def ms(self, offset_seconds: float = 0.0) -> int:
        """Epoch milliseconds ``offset_seconds`` from now."""
        return int((self.now + offset_seconds) * 1000)


class RecordingNotifier:
    """Notifier that records deliveries instead of sending them."""

    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.delivered: list[QueuedMessage] = []

    async def deliver(self, message: QueuedMessage) -> bool:
        self.delivered.append(message)
        if self.error is not None:
            raise self.error
        return self.result


async def run_pending(iterations: int = 5) -> None:
    """Let ready timer callbacks and spawned tasks run."""
    for _ in range(iterations):
        await asyncio.sleep(0)


# =============================================================================
# Queue Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def queue_path(tmp_path: Path) -> Path:
    return tmp_path / "message_db.json"


@pytest.fixture
def persistence(queue_path: Path) -> QueuePersistence:
    return QueuePersistence(queue_path)


@pytest.fixture
def store(persistence: QueuePersistence, clock: FakeClock) -> MessageStore:
    return MessageStore(persistence, clock=clock)


@pytest.fixture
def scheduler(
    store: MessageStore, notifier: RecordingNotifier, clock: FakeClock
) -> Scheduler:
    return Scheduler(
        store,
        notifier,
        update_interval=5.0,
        drift_tolerance=0.1,
        clock=clock,
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def full_config(tmp_path: Path) -> BridgeConfig:
    """Configuration with every secret present."""
    return BridgeConfig(
        server=ServerConfig(psk="test-psk"),
        pushover=PushoverConfig(token="app-token", user="user-key"),
        storage={"path": tmp_path / "message_db.json"},
    )


@pytest.fixture
def config_toml_content() -> str:
    """Valid TOML config content."""
    return """
[server]
host = "0.0.0.0"
port = 9000
psk = "file-psk"

[pushover]
token = "file-token"
user = "file-user"

[scheduler]
update_interval = 2.5
drift_tolerance = 0.25

[limits]
max_message_length = 512
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path: Path):
    """Keep tests away from the real home directory and secrets."""
    from pushbridge.config.paths import get_pushbridge_home

    for var in ("PSK", "PUSHOVER_TOKEN", "PUSHOVER_USER", "PUSHBRIDGE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PUSHBRIDGE_HOME", str(tmp_path / "home"))
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    get_pushbridge_home.cache_clear()
    yield
    get_pushbridge_home.cache_clear()


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
