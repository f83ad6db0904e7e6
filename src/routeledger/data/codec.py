"""JSON encoding for stop-id lists and route run snapshot members."""

from __future__ import annotations

import json
from typing import Any, Iterable, Sequence

from ..errors import InvalidSnapshot
from ..models.domain import SnapshotMember


def _clean_id(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def dedupe_stop_ids(values: Iterable[Any]) -> list[str]:
    """Stringify ids, drop blanks and keep only the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        stop_id = _clean_id(value)
        if not stop_id or stop_id in seen:
            continue
        seen.add(stop_id)
        result.append(stop_id)
    return result


def decode_stop_ids(raw: Any) -> list[str]:
    """Decode a ``stop_ids`` column that may hold a list or a JSON-encoded string."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"stop_ids is not valid JSON: {raw[:40]!r}") from exc
    if not isinstance(raw, list):
        raise ValueError(f"stop_ids must be a list, got {type(raw).__name__}")
    return dedupe_stop_ids(raw)


def encode_stop_ids(stop_ids: Sequence[str]) -> list[str]:
    return [str(stop_id) for stop_id in stop_ids]


def encode_members(members: Sequence[SnapshotMember]) -> list[dict[str, Any]]:
    return [
        {
            "ownerId": member.owner_id,
            "ownerName": member.owner_name,
            "color": member.color,
            "stopIds": list(member.stop_ids),
        }
        for member in members
    ]


def decode_members(raw: Any) -> list[SnapshotMember]:
    """Decode a persisted snapshot payload.

    Accepts the current ``{ownerId, ownerName, color, stopIds}`` shape and the
    older ``{driverId, driverName, color, stopIds}`` one. Entries without an
    owner id are skipped.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidSnapshot("invalid snapshot format") from exc
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidSnapshot("invalid snapshot format")

    members: list[SnapshotMember] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise InvalidSnapshot("invalid snapshot format")
        owner_id = _clean_id(entry.get("ownerId", entry.get("driverId")))
        if not owner_id:
            continue
        stop_ids = entry.get("stopIds")
        if not isinstance(stop_ids, list):
            stop_ids = []
        members.append(
            SnapshotMember(
                owner_id=owner_id,
                owner_name=entry.get("ownerName", entry.get("driverName")),
                color=entry.get("color"),
                stop_ids=tuple(dedupe_stop_ids(stop_ids)),
            )
        )
    return members
