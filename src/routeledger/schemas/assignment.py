"""Assignment request schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ReassignRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    day: Optional[str] = Field(default=None, description="Weekday name or 'all'.")
    stop_key: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("stopKey", "stopId", "stop_key"),
        description="Stop id, or the id of the client the stop was generated for.",
    )
    target_owner_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("targetOwnerId", "toDriverId", "target_owner_id"),
    )


class StopCompletionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    stop_id: str = Field(..., min_length=1, validation_alias=AliasChoices("stopId", "stop_id"))
    completed: bool = True


class OwnerActionRequest(BaseModel):
    """Body shared by the single-owner actions (reset, reverse)."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    owner_id: str = Field(..., min_length=1, validation_alias=AliasChoices("ownerId", "driverId", "owner_id"))
    day: Optional[str] = None
