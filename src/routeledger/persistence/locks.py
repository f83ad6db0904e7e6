"""Keyed exclusive locks for read-modify-write sequences."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ScopeLocks:
    """Registry of one re-entrant lock per key.

    ``hold`` takes its keys in sorted order so two callers asking for
    overlapping key sets cannot deadlock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        acquired: list[threading.RLock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
