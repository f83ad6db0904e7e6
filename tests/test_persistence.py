import threading
import time

import pytest

from routeledger.persistence.journal import WriteJournal, atomic
from routeledger.persistence.locks import ScopeLocks


def test_journal_rolls_back_newest_first():
    calls: list[str] = []

    with pytest.raises(RuntimeError):
        with atomic("test op") as journal:
            journal.record("first", lambda: calls.append("undo first"))
            journal.record("second", lambda: calls.append("undo second"))
            raise RuntimeError("write failed")

    assert calls == ["undo second", "undo first"]
    assert len(journal) == 0


def test_journal_keeps_going_when_an_undo_fails():
    calls: list[str] = []

    def broken_undo():
        raise OSError("still offline")

    journal = WriteJournal("test op")
    journal.record("first", lambda: calls.append("undo first"))
    journal.record("second", broken_undo)
    journal.rollback()

    assert calls == ["undo first"]


def test_successful_block_keeps_writes():
    calls: list[str] = []

    with atomic("test op") as journal:
        journal.record("write", lambda: calls.append("undo"))

    assert calls == []
    assert len(journal) == 1


def test_scope_locks_serialise_overlapping_key_sets():
    locks = ScopeLocks()
    active = 0
    peak = 0
    guard = threading.Lock()

    def worker(keys):
        nonlocal active, peak
        with locks.hold(*keys):
            with guard:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with guard:
                active -= 1

    key_sets = [("day:monday", "day:all"), ("day:all", "day:tuesday"), ("day:all",), ("day:all", "stop:S1")] * 3
    threads = [threading.Thread(target=worker, args=(keys,)) for keys in key_sets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert peak == 1


def test_scope_locks_are_reentrant_and_released_on_error():
    locks = ScopeLocks()

    with pytest.raises(ValueError):
        with locks.hold("day:all", "day:monday"):
            with locks.hold("day:all"):
                raise ValueError("inner failure")

    acquired = threading.Event()

    def other_thread():
        with locks.hold("day:monday", "day:all"):
            acquired.set()

    thread = threading.Thread(target=other_thread)
    thread.start()
    thread.join(timeout=5)
    assert acquired.is_set()
