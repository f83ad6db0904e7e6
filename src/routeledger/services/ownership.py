"""Journaled writes shared by the assignment and snapshot services."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..data.owners_repository import OwnerRepository
from ..data.stops_repository import StopRepository
from ..models.domain import Owner, Stop
from ..persistence.journal import WriteJournal


class OwnershipWriter:
    """Applies owner and stop writes and records how to undo each one.

    The in-memory ``Owner``/``Stop`` objects passed in are updated after every
    successful write so later steps of the same operation see the new state.
    """

    def __init__(self, owners: OwnerRepository, stops: StopRepository, journal: WriteJournal) -> None:
        self._owners = owners
        self._stops = stops
        self._journal = journal
        self.owners_touched: list[str] = []

    def set_members(self, owner: Owner, stop_ids: Sequence[str]) -> None:
        previous = list(owner.member_stop_ids)
        updated = list(stop_ids)
        if previous == updated:
            return
        handle = owner.handle
        self._owners.update_members(handle, updated)
        self._journal.record(
            f"members of {handle.source.value} {handle.id}",
            lambda: self._owners.update_members(handle, previous),
        )
        owner.member_stop_ids = updated
        if owner.id not in self.owners_touched:
            self.owners_touched.append(owner.id)
        logging.info(f"[{self._journal.operation}] owner {owner.id} ({handle.source.value}): {previous} -> {updated}")

    def backfill_profile(self, owner: Owner, display_name: Optional[str], color_tag: Optional[str]) -> None:
        name = owner.display_name or display_name
        color = owner.color_tag or color_tag
        if name == owner.display_name and color == owner.color_tag:
            return
        handle = owner.handle
        previous_name, previous_color = owner.display_name, owner.color_tag
        self._owners.update_profile(handle, name, color)
        self._journal.record(
            f"profile of {handle.source.value} {handle.id}",
            lambda: self._owners.update_profile(handle, previous_name, previous_color),
        )
        owner.display_name, owner.color_tag = name, color

    def create_owner(self, owner: Owner) -> Owner:
        handle = self._owners.create(owner)
        self._journal.record(f"creation of {handle.source.value} {handle.id}", lambda: self._owners.delete(handle))
        self.owners_touched.append(owner.id)
        logging.info(f"[{self._journal.operation}] recreated owner {owner.id} with {list(owner.member_stop_ids)}")
        owner.source = handle.source
        return owner

    def set_stop_owner(self, stop: Stop, owner_id: Optional[str]) -> None:
        previous = stop.current_owner_id
        if previous == owner_id:
            return
        stop_id = stop.id
        self._stops.update_owner(stop_id, owner_id)
        self._journal.record(f"owner of stop {stop_id}", lambda: self._stops.update_owner(stop_id, previous))
        stop.current_owner_id = owner_id
