"""Centralized logging configuration for pushbridge.

All entry points (CLI, server) should call configure_logging() early.

Logging Levels:
- DEBUG: Timer arming, per-tick details
- INFO: Queued batches, deliveries, scheduler lifecycle
- WARNING: Drift resets, failed deliveries, skipped corrupt records
- ERROR: Persistence and reconciliation failures

Events are logged with snake_case names and structured ``extra`` fields
(``queue.key``, ``error.message``, ...). Structured fields always use dotted
names; the console formatters append them as ``name=value`` pairs.
"""

import logging
import os
import re
from dataclasses import dataclass, field

# Default patterns for secret detection and redaction
DEFAULT_REDACT_PATTERNS: list[str] = [
    # Pushover application/user keys (30 alphanumerics)
    r"\b([a-z0-9]{30})\b",
    # ENV-style assignments: PUSHOVER_TOKEN=secret, PSK: secret
    r"\b(?:[A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD|USER)|PSK)\s*[=:]\s*([^\s\"']{6,})",
    # JSON-style fields in request payloads
    r"\"(?:token|user|psk)\"\s*:\s*\"([^\"]{6,})\"",
    # Bearer tokens in headers
    r"\bBearer\s+([A-Za-z0-9._\-+=/]{6,})",
]


@dataclass
class SecretRedactor:
    """Redacts sensitive information from log messages.

    Matches are replaced with partially masked versions for debuggability.
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [
                re.compile(p, re.IGNORECASE) for p in DEFAULT_REDACT_PATTERNS
            ]

    def redact(self, text: str) -> str:
        """Redact secrets from text, preserving partial info for debugging."""
        if not text:
            return text
        result = text
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full

        # Already masked
        if "..." in token:
            return full

        if len(token) < 12:
            masked = "***"
        else:
            masked = f"{token[:4]}...{token[-4:]}"
        return full.replace(token, masked) if token != full else masked


def structured_fields(record: logging.LogRecord) -> dict[str, object]:
    """Dotted ``extra`` fields attached to a record, in insertion order."""
    return {k: v for k, v in record.__dict__.items() if "." in k}


class RedactingFilter(logging.Filter):
    """Logging filter that redacts the message and string fields of each record."""

    def __init__(self, redactor: SecretRedactor | None = None) -> None:
        super().__init__()
        self._redactor = redactor or SecretRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        for name, value in structured_fields(record).items():
            if isinstance(value, str):
                setattr(record, name, self._redactor.redact(value))
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    - pushbridge.queue.scheduler -> queue
    - pushbridge.server.routes.queue -> server

    Structured fields are appended to the message:
    ``notification_failed queue.key=a error.message=timeout``
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "pushbridge":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        fields = structured_fields(record)
        if not fields:
            return text
        rendered = " ".join(f"{name}={value}" for name, value in fields.items())
        return f"{text} {rendered}"


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "uvicorn.access",
]


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
) -> None:
    """Configure logging for pushbridge.

    Call this once at application startup (CLI or server).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses PUSHBRIDGE_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful output (server mode).
    """
    if level is None:
        level = os.environ.get("PUSHBRIDGE_LOG_LEVEL", "INFO").upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = "INFO"

    log_level = getattr(logging, level)

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    console_handler.addFilter(RedactingFilter())
    handlers = [console_handler]

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Route uvicorn through our handlers (server mode)
    if use_rich:
        for logger_name in ("uvicorn", "uvicorn.error"):
            uv_logger = logging.getLogger(logger_name)
            uv_logger.handlers = list(handlers)
            uv_logger.propagate = False
