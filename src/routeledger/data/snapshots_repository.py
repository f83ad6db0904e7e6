"""Persistence for route run snapshots."""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from ..config import settings
from ..db.supabase import run_query
from ..models.domain import RouteRunSnapshot, SnapshotMember
from .codec import decode_members, encode_members


class SnapshotRepository(ABC):
    @abstractmethod
    def get(self, snapshot_id: str) -> Optional[RouteRunSnapshot]:
        """Load a route run; raises ``InvalidSnapshot`` if its members cannot be decoded."""
        raise NotImplementedError

    @abstractmethod
    def latest_id_for_day(self, day: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, day: str, limit: int) -> list[tuple[str, datetime]]:
        raise NotImplementedError

    @abstractmethod
    def exists_for_day(self, snapshot_id: str, day: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def insert(self, snapshot: RouteRunSnapshot) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_members(self, snapshot_id: str, members: Sequence[SnapshotMember]) -> None:
        raise NotImplementedError


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class SupabaseSnapshotRepository(SnapshotRepository):
    def __init__(self, client: Any, table: str | None = None) -> None:
        self._client = client
        self._table = table or settings.route_runs_table

    def _query(self):
        return self._client.table(self._table)

    def get(self, snapshot_id: str) -> Optional[RouteRunSnapshot]:
        rows = run_query(
            self._query().select("id, day, snapshot, created_at").eq("id", snapshot_id).limit(1),
            f"load route run {snapshot_id}",
        )
        if not rows:
            return None
        row = rows[0]
        return RouteRunSnapshot(
            id=str(row["id"]),
            day=str(row.get("day") or "all").lower(),
            captured_at=_parse_timestamp(row.get("created_at")),
            members=decode_members(row.get("snapshot")),
        )

    def latest_id_for_day(self, day: str) -> Optional[str]:
        rows = run_query(
            self._query().select("id").eq("day", day).order("created_at", desc=True).limit(1),
            f"load latest route run for {day}",
        )
        return str(rows[0]["id"]) if rows else None

    def list_recent(self, day: str, limit: int) -> list[tuple[str, datetime]]:
        rows = run_query(
            self._query().select("id, created_at").eq("day", day).order("created_at", desc=True).limit(limit),
            f"list route runs for {day}",
        )
        return [(str(row["id"]), _parse_timestamp(row.get("created_at"))) for row in rows]

    def exists_for_day(self, snapshot_id: str, day: str) -> bool:
        rows = run_query(
            self._query().select("id").eq("id", snapshot_id).eq("day", day).limit(1),
            f"check route run {snapshot_id}",
        )
        return bool(rows)

    def insert(self, snapshot: RouteRunSnapshot) -> None:
        run_query(
            self._query().insert(
                [
                    {
                        "id": snapshot.id,
                        "day": snapshot.day,
                        "snapshot": encode_members(snapshot.members),
                        "created_at": snapshot.captured_at.isoformat(),
                    }
                ]
            ),
            f"insert route run {snapshot.id}",
        )

    def update_members(self, snapshot_id: str, members: Sequence[SnapshotMember]) -> None:
        run_query(
            self._query().update({"snapshot": encode_members(members)}).eq("id", snapshot_id),
            f"update route run {snapshot_id}",
        )


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self, snapshots: Iterable[RouteRunSnapshot] = ()) -> None:
        self._runs: dict[str, RouteRunSnapshot] = {}
        # Insertion sequence breaks ties between runs captured in the same instant.
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        for snapshot in snapshots:
            self.insert(snapshot)

    def _ordered(self, day: str) -> list[RouteRunSnapshot]:
        runs = [run for run in self._runs.values() if run.day == day]
        return sorted(runs, key=lambda run: (run.captured_at, self._sequence[run.id]), reverse=True)

    def get(self, snapshot_id: str) -> Optional[RouteRunSnapshot]:
        run = self._runs.get(snapshot_id)
        return replace(run, members=list(run.members)) if run else None

    def latest_id_for_day(self, day: str) -> Optional[str]:
        ordered = self._ordered(day)
        return ordered[0].id if ordered else None

    def list_recent(self, day: str, limit: int) -> list[tuple[str, datetime]]:
        return [(run.id, run.captured_at) for run in self._ordered(day)[:limit]]

    def exists_for_day(self, snapshot_id: str, day: str) -> bool:
        run = self._runs.get(snapshot_id)
        return run is not None and run.day == day

    def insert(self, snapshot: RouteRunSnapshot) -> None:
        self._runs[snapshot.id] = replace(snapshot, members=list(snapshot.members))
        self._sequence[snapshot.id] = next(self._counter)

    def update_members(self, snapshot_id: str, members: Sequence[SnapshotMember]) -> None:
        run = self._runs.get(snapshot_id)
        if run is None:
            raise KeyError(f"route run '{snapshot_id}' does not exist")
        run.members = list(members)
