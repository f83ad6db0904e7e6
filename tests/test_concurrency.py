"""Mutations racing each other through the shared scope locks."""

import random
import threading

from routeledger.data.owners_repository import InMemoryOwnerRepository
from routeledger.data.snapshots_repository import InMemorySnapshotRepository
from routeledger.data.stops_repository import InMemoryStopRepository
from routeledger.models.domain import Owner, Stop
from routeledger.persistence.locks import ScopeLocks
from routeledger.services.assignment import AssignmentStore
from routeledger.services.day_scope import DayScope
from routeledger.services.snapshots import SnapshotManager

STOP_IDS = ["S1", "S2", "S3", "S4", "S5", "S6"]


class InterleavingStopRepository(InMemoryStopRepository):
    """Runs ``between`` once, right after the next lookup returns."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.between = None

    def find(self, stop_key, day=None):
        stop = super().find(stop_key, day)
        hook, self.between = self.between, None
        if hook is not None:
            hook()
        return stop


class InterleavingSnapshotRepository(InMemorySnapshotRepository):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.between = None

    def get(self, snapshot_id):
        run = super().get(snapshot_id)
        hook, self.between = self.between, None
        if hook is not None:
            hook()
        return run


def _owner(oid: str, day: str = "monday", members=()) -> Owner:
    return Owner(id=oid, day=day, display_name=f"Driver {oid}", color_tag="#17becf", member_stop_ids=list(members))


def _assert_consistent(stops, owners, day: str = "monday") -> None:
    owner_lists = {o.id: list(o.member_stop_ids) for o in owners.list_for_scope(DayScope.for_day(day))}
    back_refs = {sid: stop.current_owner_id for sid, stop in stops.get_many(STOP_IDS).items()}
    for stop_id in STOP_IDS:
        holders = [oid for oid, members in owner_lists.items() if stop_id in members]
        assert len(holders) <= 1, f"{stop_id} held by {holders}"
        assert back_refs[stop_id] == (holders[0] if holders else None)


def test_reassign_sees_a_move_that_finished_before_it_took_the_lock():
    stops = InterleavingStopRepository([Stop(id="S1", day="monday", current_owner_id="D1")])
    owners = InMemoryOwnerRepository([_owner("D1", members=["S1"]), _owner("D2")])
    store = AssignmentStore(stops, owners)

    stops.between = lambda: store.reassign("S1", "D2", "monday")
    store.reassign("S1", "D1", "monday")

    assert owners.find("D1").member_stop_ids == ["S1"]
    assert owners.find("D2").member_stop_ids == []
    assert stops.get("S1").current_owner_id == "D1"


def test_restore_applies_the_run_as_updated_just_before_the_lock():
    stops = InMemoryStopRepository(
        [Stop(id="S1", day="monday", current_owner_id="D1"), Stop(id="S2", day="monday")]
    )
    owners = InMemoryOwnerRepository([_owner("D1", members=["S1"]), _owner("D2")])
    runs = InterleavingSnapshotRepository()
    locks = ScopeLocks()
    store = AssignmentStore(stops, owners, locks)
    manager = SnapshotManager(stops, owners, runs, locks)
    run = manager.capture("monday", "new")

    def update_run():
        store.reassign("S2", "D2", "monday")
        manager.capture("monday", "updateId", run.id)
        store.reassign("S2", "D1", "monday")

    runs.between = update_run
    manager.restore(run.id)

    assert owners.find("D1").member_stop_ids == ["S1"]
    assert owners.find("D2").member_stop_ids == ["S2"]
    assert stops.get("S2").current_owner_id == "D2"


def _world():
    stops = InMemoryStopRepository([Stop(id=sid, day="monday") for sid in STOP_IDS])
    owners = InMemoryOwnerRepository([_owner("D1"), _owner("D2"), _owner("D3"), _owner("DAll", day="all")])
    return stops, owners


def test_threads_reassigning_the_same_stops_keep_one_holder_each():
    stops, owners = _world()
    store = AssignmentStore(stops, owners)
    errors: list[BaseException] = []

    def worker(seed: int) -> None:
        rng = random.Random(seed)
        try:
            for _ in range(40):
                store.reassign(rng.choice(STOP_IDS[:2]), rng.choice(["D1", "D2", "D3", "DAll"]), "monday")
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    _assert_consistent(stops, owners)


def test_reassign_racing_restore_leaves_a_consistent_partition():
    stops, owners = _world()
    locks = ScopeLocks()
    store = AssignmentStore(stops, owners, locks)
    manager = SnapshotManager(stops, owners, InMemorySnapshotRepository(), locks)
    for index, stop_id in enumerate(STOP_IDS):
        store.reassign(stop_id, ["D1", "D2", "D3"][index % 3], "monday")
    run = manager.capture("monday", "new")
    errors: list[BaseException] = []

    def reassigner(seed: int) -> None:
        rng = random.Random(seed)
        try:
            for _ in range(30):
                store.reassign(rng.choice(STOP_IDS), rng.choice(["D1", "D2", "D3", "DAll"]), "monday")
        except BaseException as exc:
            errors.append(exc)

    def restorer() -> None:
        try:
            for _ in range(10):
                manager.restore(run.id)
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=reassigner, args=(seed,)) for seed in range(4)]
    threads.append(threading.Thread(target=restorer))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    _assert_consistent(stops, owners)

    manager.restore(run.id)
    _assert_consistent(stops, owners)
    assert owners.find("D1").member_stop_ids == ["S1", "S4"]
    assert owners.find("DAll").member_stop_ids == []
