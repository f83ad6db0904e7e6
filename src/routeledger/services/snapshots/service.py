"""Capture and restore whole-day assignment partitions as route runs."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ...config import settings
from ...data.owners_repository import OwnerRepository
from ...data.snapshots_repository import SnapshotRepository
from ...data.stops_repository import StopRepository
from ...errors import InvalidDay, InvalidInput, InvalidSnapshot, SnapshotNotFound
from ...models.domain import Owner, RouteRunSnapshot, SnapshotMember
from ...persistence.journal import atomic
from ...persistence.locks import ScopeLocks
from ..day_scope import DayScope, sort_naturally
from ..ownership import OwnershipWriter


class CaptureMode(str, Enum):
    CREATE_NEW = "new"
    UPDATE_MOST_RECENT = "updateLatest"
    UPDATE_BY_ID = "updateId"


@dataclass(frozen=True, slots=True)
class CaptureResult:
    id: str
    created: bool

    @property
    def message(self) -> str:
        return "Route run saved" if self.created else "Route run updated"


class SnapshotManager:
    def __init__(
        self,
        stops: StopRepository,
        owners: OwnerRepository,
        snapshots: SnapshotRepository,
        locks: ScopeLocks | None = None,
    ) -> None:
        self._stops = stops
        self._owners = owners
        self._snapshots = snapshots
        self._locks = locks or ScopeLocks()

    def _current_members(self, scope: DayScope) -> list[SnapshotMember]:
        owners = sort_naturally(self._owners.list_for_scope(scope), key=lambda owner: owner.id)
        # Owners without stops are left out; restore clears anything absent.
        return [
            SnapshotMember(
                owner_id=owner.id,
                owner_name=owner.display_name,
                color=owner.color_tag,
                stop_ids=tuple(owner.member_stop_ids),
            )
            for owner in owners
            if owner.member_stop_ids
        ]

    def capture(
        self,
        day: Optional[str],
        mode: CaptureMode | str = CaptureMode.UPDATE_MOST_RECENT,
        snapshot_id: Optional[str] = None,
    ) -> CaptureResult:
        """Persist the current partition for ``day``."""
        try:
            mode = CaptureMode(mode)
        except ValueError as exc:
            raise InvalidInput(f"Unknown capture mode '{mode}'") from exc
        if mode is CaptureMode.UPDATE_BY_ID and not snapshot_id:
            raise InvalidInput("snapshotId is required when updating a route run by id")

        scope = DayScope.for_day(day)
        with self._locks.hold(*scope.lock_keys):
            members = self._current_members(scope)

            if mode is CaptureMode.UPDATE_BY_ID:
                if not self._snapshots.exists_for_day(str(snapshot_id), scope.day):
                    raise SnapshotNotFound(str(snapshot_id), scope.day)
                target_id: Optional[str] = str(snapshot_id)
            elif mode is CaptureMode.UPDATE_MOST_RECENT:
                target_id = self._snapshots.latest_id_for_day(scope.day)
            else:
                target_id = None

            if target_id is None:
                snapshot = RouteRunSnapshot(
                    id=str(uuid.uuid4()),
                    day=scope.day,
                    captured_at=datetime.now(timezone.utc),
                    members=members,
                )
                self._snapshots.insert(snapshot)
                result = CaptureResult(id=snapshot.id, created=True)
            else:
                self._snapshots.update_members(target_id, members)
                result = CaptureResult(id=target_id, created=False)

        logging.info(f"{result.message}: {result.id} ({scope.day}, {len(members)} owner(s))")
        return result

    def restore(self, snapshot_id: str) -> int:
        """Make the live partition of the run's day equal the captured one.

        Returns the number of owners named by the run.
        """
        if not snapshot_id:
            raise InvalidInput("snapshotId required")
        snapshot = self._snapshots.get(str(snapshot_id))
        if snapshot is None:
            raise SnapshotNotFound(str(snapshot_id))
        try:
            scope = DayScope.for_day(snapshot.day)
        except InvalidDay as exc:
            raise InvalidSnapshot("invalid snapshot format") from exc

        with self._locks.hold(*scope.lock_keys):
            # Load again under the lock so a concurrent update of this run is seen whole.
            snapshot = self._snapshots.get(snapshot.id)
            if snapshot is None:
                raise SnapshotNotFound(str(snapshot_id), scope.day)
            live = {owner.id: owner for owner in self._owners.list_for_scope(scope)}
            restored_owner_of = self._validate(snapshot, live)
            member_ids = {member.owner_id for member in snapshot.members}
            previously_held = {sid for owner in live.values() for sid in owner.member_stop_ids}
            stops = self._stops.get_many([*restored_owner_of, *previously_held])

            with atomic(f"restore {snapshot.id}") as journal:
                writer = OwnershipWriter(self._owners, self._stops, journal)

                for member in snapshot.members:
                    owner = live.get(member.owner_id)
                    if owner is None:
                        # Unnamed members get the "Driver <id>" label the route planner shows.
                        writer.create_owner(
                            Owner(
                                id=member.owner_id,
                                day=scope.day,
                                display_name=member.owner_name or f"Driver {member.owner_id}",
                                color_tag=member.color,
                                member_stop_ids=list(member.stop_ids),
                            )
                        )
                        continue
                    writer.set_members(owner, member.stop_ids)
                    writer.backfill_profile(owner, member.owner_name, member.color)

                for stop_id, owner_id in restored_owner_of.items():
                    stop = stops.get(stop_id)
                    if stop is not None:
                        writer.set_stop_owner(stop, owner_id)

                for owner in live.values():
                    if owner.id not in member_ids:
                        writer.set_members(owner, [])

                # Stops that no restored list holds any more lose their
                # back-reference, unless it points outside this day's scope.
                in_scope = member_ids | set(live)
                for stop_id in previously_held - set(restored_owner_of):
                    stop = stops.get(stop_id)
                    if stop is not None and stop.current_owner_id in in_scope:
                        writer.set_stop_owner(stop, None)

        logging.info(
            f"Restored route run {snapshot.id} ({scope.day}): {len(snapshot.members)} owner(s) in run, "
            f"owners rewritten: {writer.owners_touched}"
        )
        return len(snapshot.members)

    def _validate(self, snapshot: RouteRunSnapshot, live: dict[str, Owner]) -> dict[str, str]:
        """Check a run can be applied and map each stop to its restored owner."""
        owner_of: dict[str, str] = {}
        for member in snapshot.members:
            if member.owner_id not in live and self._owners.find(member.owner_id) is not None:
                raise InvalidSnapshot(
                    f"Route run {snapshot.id} names owner '{member.owner_id}' which belongs to another day"
                )
            for stop_id in member.stop_ids:
                holder = owner_of.setdefault(stop_id, member.owner_id)
                if holder != member.owner_id:
                    raise InvalidSnapshot(
                        f"Route run {snapshot.id} assigns stop '{stop_id}' to both '{holder}' and '{member.owner_id}'"
                    )
        return owner_of

    def list_recent(self, day: Optional[str], limit: Optional[int] = None) -> list[tuple[str, datetime]]:
        scope = DayScope.for_day(day)
        return self._snapshots.list_recent(scope.day, limit or settings.recent_runs_limit)
