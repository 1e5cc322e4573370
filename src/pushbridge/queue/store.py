"""Message store backed by a JSON snapshot file."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from pushbridge.queue.persistence import QueuePersistence
from pushbridge.queue.types import (
    MessageLimits,
    QueuedMessage,
    UpsertHook,
    validate_batch,
)

logger = logging.getLogger(__name__)


class MessageStore:
    """Pending messages keyed by message key.

    Loaded once at construction; every mutation rewrites the snapshot.
    """

    def __init__(
        self,
        persistence: QueuePersistence,
        limits: MessageLimits | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._persistence = persistence
        self._limits = limits or MessageLimits()
        self._clock = clock
        self._hooks: list[UpsertHook] = []
        self._messages: dict[str, QueuedMessage] = persistence.load()

    @property
    def persistence(self) -> QueuePersistence:
        return self._persistence

    @property
    def limits(self) -> MessageLimits:
        return self._limits

    def on_upsert(self, hook: UpsertHook) -> UpsertHook:
        """Decorator to register a hook called for every upserted key."""
        self._hooks.append(hook)
        return hook

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, QueuedMessage]:
        return dict(self._messages)

    def get(self, key: str) -> QueuedMessage | None:
        return self._messages.get(key)

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    def get_stats(self) -> dict[str, Any]:
        now_ms = self._clock() * 1000.0
        messages = list(self._messages.values())
        next_due = min((m.timestamp for m in messages), default=None)
        return {
            "file.path": str(self._persistence.path),
            "total": len(messages),
            "overdue": sum(1 for m in messages if m.timestamp <= now_ms),
            "next_due": next_due,
        }

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def upsert(self, entries: Any) -> list[str]:
        """Validate and apply a batch of candidates.

        Either every entry is applied or none is. Hooks run for each key as
        its entry is replaced, before the snapshot is written.

        Raises:
            MessageValidationError: If any entry is invalid.
        """
        validated = validate_batch(entries, self._clock() * 1000.0, self._limits)

        for key, message in validated.items():
            self._messages[key] = message
            for hook in self._hooks:
                hook(key)

        if validated:
            logger.info("messages_queued", extra={"queue.keys": list(validated)})
            self._persist()
        return list(validated)

    def remove(self, key: str) -> bool:
        removed = self._messages.pop(key, None) is not None
        self._persist()
        return removed

    def _persist(self) -> None:
        self._persistence.save(self._messages)
