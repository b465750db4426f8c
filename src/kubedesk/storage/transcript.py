"""Bounded in-memory transcript of executed kubectl commands."""

from __future__ import annotations

import threading

from kubedesk.storage.models import CommandResult

DEFAULT_CAPACITY = 200


class Transcript:
    """FIFO window over the most recent command results.

    The lock only guards list mutation and copying; callers never hold it
    while a process runs or output is decoded.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("Transcript capacity must be positive")
        self.capacity = capacity
        self._entries: list[CommandResult] = []
        self._lock = threading.Lock()

    def append(self, result: CommandResult) -> None:
        with self._lock:
            self._entries.append(result)
            if len(self._entries) > self.capacity:
                del self._entries[: len(self._entries) - self.capacity]

    def snapshot(self) -> list[CommandResult]:
        """Return a copy of the entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
