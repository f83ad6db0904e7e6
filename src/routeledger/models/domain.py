"""Domain models for stops, owners and route run snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OwnerSource(str, Enum):
    """Physical collection an owner record lives in."""

    DRIVERS = "drivers"
    LEGACY_ROUTES = "routes"


@dataclass(slots=True)
class Stop:
    """A delivery unit that can be owned by at most one owner per day scope."""

    id: str
    day: str
    current_owner_id: Optional[str] = None
    completed: bool = False
    external_key: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OwnerHandle:
    """Identifies an owner together with the collection that stores it."""

    id: str
    source: OwnerSource


@dataclass(slots=True)
class Owner:
    """A driver or legacy route holding an ordered list of stop ids."""

    id: str
    day: str
    display_name: Optional[str] = None
    color_tag: Optional[str] = None
    member_stop_ids: list[str] = field(default_factory=list)
    source: OwnerSource = OwnerSource.DRIVERS

    @property
    def handle(self) -> OwnerHandle:
        return OwnerHandle(id=self.id, source=self.source)


@dataclass(frozen=True, slots=True)
class SnapshotMember:
    owner_id: str
    owner_name: Optional[str]
    color: Optional[str]
    stop_ids: tuple[str, ...]


@dataclass(slots=True)
class RouteRunSnapshot:
    """Point-in-time capture of the owner to stops partition for one day."""

    id: str
    day: str
    captured_at: datetime
    members: list[SnapshotMember] = field(default_factory=list)


@dataclass(slots=True)
class OwnerProgress:
    owner_id: str
    display_name: Optional[str]
    color_tag: Optional[str]
    stop_ids: list[str]
    total_stops: int
    completed_stops: int
