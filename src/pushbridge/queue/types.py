"""Queue types.

Public types:
- QueuedMessage: An immutable pending message
- MessageLimits: Field length limits applied at validation
- MessageValidationError: Raised when a candidate batch is rejected
- Notifier: Async delivery capability for due messages
- UpsertHook: Callback invoked for every key touched by an upsert
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEY_LENGTH = 64
DEFAULT_MAX_MESSAGE_LENGTH = 1024
DEFAULT_MAX_TITLE_LENGTH = 250


class MessageValidationError(ValueError):
    """A candidate message failed validation; the whole batch is rejected."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"{key!r}: {reason}")


@dataclass(frozen=True)
class MessageLimits:
    """Field length limits for queued messages."""

    max_key_length: int = DEFAULT_MAX_KEY_LENGTH
    max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH
    max_title_length: int = DEFAULT_MAX_TITLE_LENGTH


@dataclass(frozen=True)
class QueuedMessage:
    """A message waiting for its due time.

    Frozen so that a timer can hold the exact payload it was armed with.
    """

    key: str
    message: str
    timestamp: float  # Due time, milliseconds since the Unix epoch
    title: str | None = None

    @property
    def due_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000.0, UTC)

    def seconds_until_due(self, now: float) -> float:
        """Seconds from ``now`` (epoch seconds) until due, never negative."""
        return max(self.timestamp / 1000.0 - now, 0.0)

    def to_dict(self) -> dict[str, Any]:
        """Wire/on-disk form, without the key."""
        data: dict[str, Any] = {"message": self.message, "timestamp": self.timestamp}
        if self.title is not None:
            data["title"] = self.title
        return data

    @classmethod
    def from_dict(cls, key: str, data: Mapping[str, Any]) -> QueuedMessage:
        """Build from the wire/on-disk form without checking limits.

        Raises:
            ValueError: If required fields are missing or mistyped.
        """
        message = data.get("message")
        timestamp = data.get("timestamp")
        title = data.get("title")
        if not isinstance(message, str):
            raise ValueError("message must be a string")
        if not _is_number(timestamp):
            raise ValueError("timestamp must be a number")
        if not _is_representable(timestamp):
            raise ValueError("timestamp out of range")
        if title is not None and not isinstance(title, str):
            raise ValueError("title must be a string")
        return cls(key=key, message=message, timestamp=timestamp, title=title)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_representable(timestamp: float) -> bool:
    """Whether an epoch-millisecond timestamp is finite and fits a datetime."""
    try:
        seconds = float(timestamp) / 1000.0
        if not math.isfinite(seconds):
            return False
        datetime.fromtimestamp(seconds, UTC)
    except (OverflowError, ValueError, OSError):
        return False
    return True


def validate_message(
    key: Any,
    candidate: Any,
    now_ms: float,
    limits: MessageLimits,
) -> QueuedMessage:
    """Validate a single candidate against ``limits`` and ``now_ms``.

    Raises:
        MessageValidationError: If any field constraint is violated.
    """
    if not isinstance(key, str) or not 0 < len(key) <= limits.max_key_length:
        raise MessageValidationError(str(key)[:80], "invalid key length")
    if not isinstance(candidate, Mapping):
        raise MessageValidationError(key, "entry must be an object")

    message = candidate.get("message")
    if not isinstance(message, str):
        raise MessageValidationError(key, "message must be a string")
    if not 0 < len(message) <= limits.max_message_length:
        raise MessageValidationError(key, "invalid message length")

    title = candidate.get("title")
    if title is not None:
        if not isinstance(title, str):
            raise MessageValidationError(key, "title must be a string")
        if len(title) > limits.max_title_length:
            raise MessageValidationError(key, "title too long")

    timestamp = candidate.get("timestamp")
    if not _is_number(timestamp):
        raise MessageValidationError(key, "timestamp must be a number")
    if not _is_representable(timestamp):
        raise MessageValidationError(key, "timestamp out of range")
    if timestamp <= now_ms:
        raise MessageValidationError(key, "timestamp must be in the future")

    # An empty title is kept as given; only None means "no title".
    return QueuedMessage(key=key, message=message, timestamp=timestamp, title=title)


def validate_batch(
    entries: Any,
    now_ms: float,
    limits: MessageLimits | None = None,
) -> dict[str, QueuedMessage]:
    """Validate a whole batch against one ``now_ms`` reference.

    Returns the parsed messages keyed by message key, or raises on the first
    invalid entry without returning anything partial.

    Raises:
        MessageValidationError: If the batch or any entry is invalid.
    """
    if not isinstance(entries, Mapping):
        raise MessageValidationError("", "batch must be an object")
    limits = limits or MessageLimits()
    return {
        key: validate_message(key, candidate, now_ms, limits)
        for key, candidate in entries.items()
    }


class Notifier(Protocol):
    """Delivers one message, reporting success or failure."""

    async def deliver(self, message: QueuedMessage) -> bool: ...


UpsertHook = Callable[[str], None]
