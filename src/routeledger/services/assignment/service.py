"""Stop ownership mutations.

This is the only place that moves stops between owners. Every mutation runs
under the scope locks and a write journal so the owner lists and the stop
back-references change together or not at all.
"""

from __future__ import annotations

import logging
from typing import Optional

from ...data.owners_repository import OwnerRepository
from ...data.stops_repository import StopRepository
from ...errors import InvalidInput, OwnerNotFound, StopNotFound
from ...models.domain import Owner, Stop
from ...persistence.journal import atomic
from ...persistence.locks import ScopeLocks
from ..day_scope import DayScope, is_wildcard, normalize_day
from ..ownership import OwnershipWriter


class AssignmentStore:
    def __init__(self, stops: StopRepository, owners: OwnerRepository, locks: ScopeLocks | None = None) -> None:
        self._stops = stops
        self._owners = owners
        self._locks = locks or ScopeLocks()

    def _resolve_stop(self, stop_key: str, day: str) -> Stop:
        stop = self._stops.find(stop_key, None if is_wildcard(day) else day)
        if stop is None:
            raise StopNotFound(stop_key, day)
        return stop

    def _resolve_owner(self, owner_id: str, scope: DayScope) -> Owner:
        owner = self._owners.find_in_scope(owner_id, scope)
        if owner is None:
            raise OwnerNotFound(owner_id, scope.day)
        return owner

    def reassign(self, stop_key: str, target_owner_id: str, day: Optional[str] = None) -> Stop:
        """Move one stop to ``target_owner_id``.

        The stop is removed from every other owner in its day scope, appended
        to the end of the target's list if it is not there yet, and its
        back-reference is pointed at the target. Calling it again with the
        same arguments writes nothing.
        """
        if not stop_key or not target_owner_id:
            raise InvalidInput("stopKey and targetOwnerId are required")
        requested_day = normalize_day(day)
        located = self._resolve_stop(str(stop_key), requested_day)
        scope = DayScope.for_day(located.day)

        with self._locks.hold(*scope.lock_keys, f"stop:{located.id}"):
            # Re-read under the lock; the first read only names the stop and its day.
            stop = self._stops.get(located.id)
            if stop is None:
                raise StopNotFound(str(stop_key), requested_day)
            target = self._resolve_owner(str(target_owner_id), scope)

            with atomic(f"reassign {stop.id}") as journal:
                writer = OwnershipWriter(self._owners, self._stops, journal)
                for owner in self._owners.list_for_scope(scope):
                    if owner.id == target.id or stop.id not in owner.member_stop_ids:
                        continue
                    writer.set_members(owner, [sid for sid in owner.member_stop_ids if sid != stop.id])

                if stop.id not in target.member_stop_ids:
                    writer.set_members(target, [*target.member_stop_ids, stop.id])

                writer.set_stop_owner(stop, target.id)

            if writer.owners_touched:
                logging.info(f"Reassigned stop {stop.id} to {target.id} ({scope.day}); owners touched: {writer.owners_touched}")
            else:
                logging.info(f"Stop {stop.id} already assigned to {target.id} ({scope.day})")
        return stop

    def reset_owner(self, owner_id: str, day: Optional[str] = None) -> int:
        """Empty one owner's list and clear the back-references that pointed at it."""
        if not owner_id:
            raise InvalidInput("ownerId is required")
        scope = DayScope.for_day(day)
        with self._locks.hold(*scope.lock_keys):
            owner = self._resolve_owner(str(owner_id), scope)
            cleared = list(owner.member_stop_ids)
            stops = self._stops.get_many(cleared)
            with atomic(f"reset {owner.id}") as journal:
                writer = OwnershipWriter(self._owners, self._stops, journal)
                writer.set_members(owner, [])
                for stop_id in cleared:
                    stop = stops.get(stop_id)
                    if stop is not None and stop.current_owner_id == owner.id:
                        writer.set_stop_owner(stop, None)
        logging.info(f"Reset owner {owner.id} ({scope.day}); {len(cleared)} stop(s) cleared")
        return len(cleared)

    def reverse_route(self, owner_id: str, day: Optional[str] = None) -> int:
        """Reverse the delivery order of one owner's stops."""
        if not owner_id:
            raise InvalidInput("ownerId is required")
        scope = DayScope.for_day(day)
        with self._locks.hold(*scope.lock_keys):
            owner = self._resolve_owner(str(owner_id), scope)
            members = list(owner.member_stop_ids)
            with atomic(f"reverse {owner.id}") as journal:
                OwnershipWriter(self._owners, self._stops, journal).set_members(owner, members[::-1])
        return len(members)

    def set_stop_completed(self, stop_id: str, completed: bool) -> Stop:
        if not stop_id or not str(stop_id).strip():
            raise InvalidInput("stopId is required")
        stop = self._stops.get(str(stop_id).strip())
        if stop is None:
            raise StopNotFound(str(stop_id))
        if stop.completed != completed:
            self._stops.update_completed(stop.id, completed)
            stop.completed = completed
        return stop
