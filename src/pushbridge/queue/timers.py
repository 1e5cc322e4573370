"""In-memory countdown timers keyed by message key."""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class TimerSet:
    """At most one armed ``asyncio.TimerHandle`` per key.

    Must be used from inside a running event loop.
    """

    def __init__(self) -> None:
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(
        self,
        key: str,
        delay: float,
        callback: Callable[[], None],
    ) -> asyncio.TimerHandle:
        """Arm a timer for ``key``, replacing any existing one."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(max(delay, 0.0), callback)
        self._handles[key] = handle
        return handle

    def cancel(self, key: str) -> bool:
        """Cancel and forget the timer for ``key``. Safe to repeat."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def discard(self, key: str) -> None:
        """Forget a timer that has already fired."""
        self._handles.pop(key, None)

    def cancel_all(self) -> int:
        count = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        return count

    def keys(self) -> set[str]:
        return set(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: object) -> bool:
        return key in self._handles
