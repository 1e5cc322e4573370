"""JSON load/save for the message queue.

The whole queue is stored as one JSON object keyed by message key.
Atomic writes use tempfile + fsync + os.replace().
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pushbridge.queue.types import QueuedMessage

logger = logging.getLogger(__name__)


class QueuePersistence:
    """Reads and writes the queue snapshot file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, QueuedMessage]:
        """Load the persisted queue.

        A missing, empty or unreadable file yields an empty mapping. Records
        that cannot be parsed are skipped.
        """
        raw = self._load_raw()
        messages: dict[str, QueuedMessage] = {}
        for key, data in raw.items():
            if not isinstance(data, Mapping):
                logger.warning("corrupt_queue_record", extra={"queue.key": key})
                continue
            try:
                messages[key] = QueuedMessage.from_dict(key, data)
            except ValueError as e:
                logger.warning(
                    "corrupt_queue_record",
                    extra={"queue.key": key, "error.message": str(e)},
                )
        logger.info(
            "queue_loaded",
            extra={"file.path": str(self._path), "queue.count": len(messages)},
        )
        return messages

    def save(self, messages: Mapping[str, QueuedMessage]) -> bool:
        """Overwrite the snapshot. Failures are logged, never raised."""
        data = {key: message.to_dict() for key, message in messages.items()}
        try:
            _write_json_atomic(self._path, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(
                "queue_save_failed",
                extra={"file.path": str(self._path), "error.message": str(e)},
            )
            return False
        return True

    def _load_raw(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.error(
                "queue_load_failed",
                extra={"file.path": str(self._path), "error.message": str(e)},
            )
            return {}

        if not text.strip():
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            logger.error("queue_load_failed", extra={"file.path": str(self._path)})
            return {}

        if not isinstance(raw, dict):
            logger.error("queue_load_failed", extra={"file.path": str(self._path)})
            return {}
        return raw


def _write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Write JSON atomically via tempfile + fsync + os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, separators=(",", ":")))
            f.flush()
            os.fsync(f.fileno())
        Path(tmp).replace(path)
    except BaseException:
        try:
            Path(tmp).unlink()
        except OSError:
            pass
        raise
