"""Progress feed schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import OwnerProgress


class OwnerProgressModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    color: Optional[str] = None
    stop_ids: List[str] = Field(default_factory=list, alias="stopIds")
    total_stops: int = Field(..., ge=0, alias="totalStops")
    completed_stops: int = Field(..., ge=0, alias="completedStops")

    @classmethod
    def from_domain(cls, progress: OwnerProgress) -> "OwnerProgressModel":
        return cls(
            id=progress.owner_id,
            name=progress.display_name,
            color=progress.color_tag,
            stop_ids=list(progress.stop_ids),
            total_stops=progress.total_stops,
            completed_stops=progress.completed_stops,
        )
