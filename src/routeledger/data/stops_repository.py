"""Data access for stop records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import run_query
from ..models.domain import Stop

STOP_COLUMNS = "id, day, client_id, assigned_driver_id, completed"


class StopRepository(ABC):
    """Contract for stop stores.

    Only ``current_owner_id`` and ``completed`` are ever written; stops are
    created and deleted by the order pipeline.
    """

    @abstractmethod
    def get(self, stop_id: str) -> Optional[Stop]:
        raise NotImplementedError

    @abstractmethod
    def find(self, stop_key: str, day: Optional[str] = None) -> Optional[Stop]:
        """Resolve a stop by its id or, failing that, by its external key.

        When ``day`` is given only stops for that day match.
        """
        raise NotImplementedError

    @abstractmethod
    def get_many(self, stop_ids: Iterable[str]) -> dict[str, Stop]:
        raise NotImplementedError

    @abstractmethod
    def update_owner(self, stop_id: str, owner_id: Optional[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_completed(self, stop_id: str, completed: bool) -> None:
        raise NotImplementedError


def _row_to_stop(row: dict[str, Any]) -> Stop:
    owner_id = row.get("assigned_driver_id")
    client_id = row.get("client_id")
    return Stop(
        id=str(row["id"]),
        day=str(row.get("day") or "all").lower(),
        current_owner_id=str(owner_id) if owner_id is not None else None,
        completed=bool(row.get("completed")),
        external_key=str(client_id) if client_id is not None else None,
    )


class SupabaseStopRepository(StopRepository):
    def __init__(self, client: Any, table: str | None = None) -> None:
        self._client = client
        self._table = table or settings.stops_table

    def _select(self):
        return self._client.table(self._table).select(STOP_COLUMNS)

    def get(self, stop_id: str) -> Optional[Stop]:
        rows = run_query(self._select().eq("id", stop_id).limit(1), f"load stop {stop_id}")
        return _row_to_stop(rows[0]) if rows else None

    def find(self, stop_key: str, day: Optional[str] = None) -> Optional[Stop]:
        for column in ("id", "client_id"):
            query = self._select().eq(column, stop_key)
            if day:
                query = query.eq("day", day)
            rows = run_query(query.limit(1), f"resolve stop {stop_key} by {column}")
            if rows:
                return _row_to_stop(rows[0])
        return None

    def get_many(self, stop_ids: Iterable[str]) -> dict[str, Stop]:
        ids = list(dict.fromkeys(stop_ids))
        if not ids:
            return {}
        rows = run_query(self._select().in_("id", ids), f"load {len(ids)} stops")
        stops = (_row_to_stop(row) for row in rows)
        return {stop.id: stop for stop in stops}

    def update_owner(self, stop_id: str, owner_id: Optional[str]) -> None:
        run_query(
            self._client.table(self._table).update({"assigned_driver_id": owner_id}).eq("id", stop_id),
            f"set owner of stop {stop_id}",
        )

    def update_completed(self, stop_id: str, completed: bool) -> None:
        run_query(
            self._client.table(self._table).update({"completed": completed}).eq("id", stop_id),
            f"set completion of stop {stop_id}",
        )


class InMemoryStopRepository(StopRepository):
    """Dict-backed store used when Supabase is not configured and in tests."""

    def __init__(self, stops: Iterable[Stop] = ()) -> None:
        self._stops: dict[str, Stop] = {}
        for stop in stops:
            self.add(stop)

    def add(self, stop: Stop) -> None:
        self._stops[stop.id] = replace(stop)

    def remove(self, stop_id: str) -> None:
        self._stops.pop(stop_id, None)

    def get(self, stop_id: str) -> Optional[Stop]:
        stop = self._stops.get(stop_id)
        return replace(stop) if stop else None

    def find(self, stop_key: str, day: Optional[str] = None) -> Optional[Stop]:
        candidates = [s for s in self._stops.values() if not day or s.day == day]
        for stop in candidates:
            if stop.id == stop_key:
                return replace(stop)
        for stop in candidates:
            if stop.external_key is not None and stop.external_key == stop_key:
                return replace(stop)
        return None

    def get_many(self, stop_ids: Iterable[str]) -> dict[str, Stop]:
        return {sid: replace(self._stops[sid]) for sid in stop_ids if sid in self._stops}

    def update_owner(self, stop_id: str, owner_id: Optional[str]) -> None:
        if stop_id in self._stops:
            self._stops[stop_id].current_owner_id = owner_id

    def update_completed(self, stop_id: str, completed: bool) -> None:
        if stop_id in self._stops:
            self._stops[stop_id].completed = completed
