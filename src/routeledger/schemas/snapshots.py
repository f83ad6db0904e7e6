"""Route run request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CaptureRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    day: Optional[str] = None
    mode: Literal["new", "updateLatest", "updateId"] = Field(
        default="updateLatest",
        description="'new' always inserts; 'updateLatest' overwrites the newest run for the day; "
        "'updateId' overwrites snapshotId.",
    )
    snapshot_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("snapshotId", "runId", "snapshot_id"))


class RestoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    snapshot_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("snapshotId", "runId", "snapshot_id"))


class RouteRunSummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime = Field(..., alias="createdAt")


class RouteRunListResponse(BaseModel):
    runs: List[RouteRunSummaryModel]
