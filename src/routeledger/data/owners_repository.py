"""Owner records spread over the day-scoped and the legacy collection.

Drivers live in a day-scoped table; older route records live in a table with
no day column and apply to every day. Both are exposed here as one id space:
lookups check both tables and every write is addressed through an
``OwnerHandle`` so it lands back in the table the owner came from.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Iterable, Optional, Sequence

from ..config import settings
from ..db.supabase import run_query
from ..models.domain import Owner, OwnerHandle, OwnerSource
from ..services.day_scope import WILDCARD_DAY, DayScope
from .codec import decode_stop_ids, encode_stop_ids


class OwnerRepository(ABC):
    """Contract for the unified owner namespace."""

    @abstractmethod
    def find(self, owner_id: str) -> Optional[Owner]:
        """Look an owner up by id in both collections."""
        raise NotImplementedError

    @abstractmethod
    def list_for_scope(self, scope: DayScope) -> list[Owner]:
        """Every owner visible from ``scope``, de-duplicated by id."""
        raise NotImplementedError

    @abstractmethod
    def update_members(self, handle: OwnerHandle, stop_ids: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_profile(self, handle: OwnerHandle, display_name: Optional[str], color_tag: Optional[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def create(self, owner: Owner) -> OwnerHandle:
        """Insert a new owner into the day-scoped collection."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, handle: OwnerHandle) -> None:
        raise NotImplementedError

    def find_in_scope(self, owner_id: str, scope: DayScope) -> Optional[Owner]:
        owner = self.find(owner_id)
        if owner is None or not scope.contains(owner.day):
            return None
        return owner


def _dedupe_owners(owners: Iterable[Owner]) -> list[Owner]:
    seen: set[str] = set()
    result: list[Owner] = []
    for owner in owners:
        if owner.id in seen:
            logging.warning(f"Owner id '{owner.id}' exists in more than one collection; ignoring the {owner.source.value} record")
            continue
        seen.add(owner.id)
        result.append(owner)
    return result


def _row_to_owner(row: dict[str, Any], source: OwnerSource) -> Owner:
    owner_id = str(row["id"])
    try:
        members = decode_stop_ids(row.get("stop_ids"))
    except ValueError as exc:
        logging.warning(f"Ignoring unreadable stop_ids on {source.value} '{owner_id}': {exc}")
        members = []
    if source is OwnerSource.LEGACY_ROUTES:
        day = WILDCARD_DAY
    else:
        day = str(row.get("day") or WILDCARD_DAY).lower()
    return Owner(
        id=owner_id,
        day=day,
        display_name=row.get("name"),
        color_tag=row.get("color"),
        member_stop_ids=members,
        source=source,
    )


class SupabaseOwnerRepository(OwnerRepository):
    def __init__(
        self,
        client: Any,
        drivers_table: str | None = None,
        legacy_table: str | None = None,
    ) -> None:
        self._client = client
        self._tables = {
            OwnerSource.DRIVERS: drivers_table or settings.drivers_table,
            OwnerSource.LEGACY_ROUTES: legacy_table or settings.legacy_routes_table,
        }

    def _table(self, source: OwnerSource):
        return self._client.table(self._tables[source])

    def find(self, owner_id: str) -> Optional[Owner]:
        for source, columns in (
            (OwnerSource.DRIVERS, "id, day, name, color, stop_ids"),
            (OwnerSource.LEGACY_ROUTES, "id, name, color, stop_ids"),
        ):
            rows = run_query(
                self._table(source).select(columns).eq("id", owner_id).limit(1),
                f"look up owner {owner_id} in {source.value}",
            )
            if rows:
                return _row_to_owner(rows[0], source)
        return None

    def list_for_scope(self, scope: DayScope) -> list[Owner]:
        driver_rows = run_query(
            self._table(OwnerSource.DRIVERS)
            .select("id, day, name, color, stop_ids")
            .in_("day", list(scope.day_tokens))
            .order("id"),
            f"load drivers for {scope.day}",
        )
        legacy_rows = run_query(
            self._table(OwnerSource.LEGACY_ROUTES).select("id, name, color, stop_ids").order("id"),
            "load legacy routes",
        )
        owners = [_row_to_owner(row, OwnerSource.DRIVERS) for row in driver_rows]
        owners.extend(_row_to_owner(row, OwnerSource.LEGACY_ROUTES) for row in legacy_rows)
        return _dedupe_owners(owners)

    def update_members(self, handle: OwnerHandle, stop_ids: Sequence[str]) -> None:
        run_query(
            self._table(handle.source).update({"stop_ids": encode_stop_ids(stop_ids)}).eq("id", handle.id),
            f"update members of {handle.source.value} {handle.id}",
        )

    def update_profile(self, handle: OwnerHandle, display_name: Optional[str], color_tag: Optional[str]) -> None:
        run_query(
            self._table(handle.source).update({"name": display_name, "color": color_tag}).eq("id", handle.id),
            f"update profile of {handle.source.value} {handle.id}",
        )

    def create(self, owner: Owner) -> OwnerHandle:
        run_query(
            self._table(OwnerSource.DRIVERS).insert(
                [
                    {
                        "id": owner.id,
                        "day": owner.day,
                        "name": owner.display_name,
                        "color": owner.color_tag,
                        "stop_ids": encode_stop_ids(owner.member_stop_ids),
                    }
                ]
            ),
            f"create driver {owner.id}",
        )
        return OwnerHandle(id=owner.id, source=OwnerSource.DRIVERS)

    def delete(self, handle: OwnerHandle) -> None:
        run_query(
            self._table(handle.source).delete().eq("id", handle.id),
            f"delete {handle.source.value} {handle.id}",
        )


class InMemoryOwnerRepository(OwnerRepository):
    """Two dicts standing in for the driver and legacy route tables."""

    def __init__(self, drivers: Iterable[Owner] = (), legacy_routes: Iterable[Owner] = ()) -> None:
        self._collections: dict[OwnerSource, dict[str, Owner]] = {
            OwnerSource.DRIVERS: {},
            OwnerSource.LEGACY_ROUTES: {},
        }
        for owner in drivers:
            self.add(owner)
        for owner in legacy_routes:
            self.add(replace(owner, day=WILDCARD_DAY, source=OwnerSource.LEGACY_ROUTES))

    def add(self, owner: Owner) -> None:
        self._collections[owner.source][owner.id] = replace(owner, member_stop_ids=list(owner.member_stop_ids))

    @staticmethod
    def _copy(owner: Owner) -> Owner:
        return replace(owner, member_stop_ids=list(owner.member_stop_ids))

    def collection(self, source: OwnerSource) -> dict[str, Owner]:
        return self._collections[source]

    def find(self, owner_id: str) -> Optional[Owner]:
        for source in (OwnerSource.DRIVERS, OwnerSource.LEGACY_ROUTES):
            owner = self._collections[source].get(owner_id)
            if owner is not None:
                return self._copy(owner)
        return None

    def list_for_scope(self, scope: DayScope) -> list[Owner]:
        drivers = sorted(
            (o for o in self._collections[OwnerSource.DRIVERS].values() if scope.contains(o.day)),
            key=lambda o: o.id,
        )
        legacy = sorted(self._collections[OwnerSource.LEGACY_ROUTES].values(), key=lambda o: o.id)
        return _dedupe_owners(self._copy(o) for o in [*drivers, *legacy])

    def _stored(self, handle: OwnerHandle) -> Owner:
        owner = self._collections[handle.source].get(handle.id)
        if owner is None:
            raise KeyError(f"{handle.source.value} '{handle.id}' does not exist")
        return owner

    def update_members(self, handle: OwnerHandle, stop_ids: Sequence[str]) -> None:
        self._stored(handle).member_stop_ids = list(stop_ids)

    def update_profile(self, handle: OwnerHandle, display_name: Optional[str], color_tag: Optional[str]) -> None:
        stored = self._stored(handle)
        stored.display_name = display_name
        stored.color_tag = color_tag

    def create(self, owner: Owner) -> OwnerHandle:
        created = replace(owner, member_stop_ids=list(owner.member_stop_ids), source=OwnerSource.DRIVERS)
        self._collections[OwnerSource.DRIVERS][created.id] = created
        return created.handle

    def delete(self, handle: OwnerHandle) -> None:
        self._collections[handle.source].pop(handle.id, None)
