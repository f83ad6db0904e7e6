"""All-or-nothing write sequences over stores without transactions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator


class WriteJournal:
    """Collects one undo action per completed write.

    ``rollback`` replays them newest first. An undo that fails is logged and
    the remaining undos still run.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._undo: list[tuple[str, Callable[[], None]]] = []

    def __len__(self) -> int:
        return len(self._undo)

    def record(self, description: str, undo: Callable[[], None]) -> None:
        self._undo.append((description, undo))

    def rollback(self) -> None:
        if not self._undo:
            return
        logging.warning(f"Rolling back {len(self._undo)} write(s) of {self.operation}")
        while self._undo:
            description, undo = self._undo.pop()
            try:
                undo()
            except Exception:
                logging.exception(f"Rollback of '{description}' failed during {self.operation}")


@contextmanager
def atomic(operation: str) -> Iterator[WriteJournal]:
    """Yield a journal and roll it back if the block raises."""
    journal = WriteJournal(operation)
    try:
        yield journal
    except Exception:
        journal.rollback()
        raise
