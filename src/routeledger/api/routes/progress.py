"""Mobile progress feed."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from ...schemas.progress import OwnerProgressModel
from ...services.progress import ProgressAggregator
from ..dependencies import get_progress_aggregator

router = APIRouter(tags=["progress"])


@router.get("/progress", response_model=list[OwnerProgressModel], status_code=status.HTTP_200_OK)
def progress(
    day: str | None = Query(default=None, description="Weekday name or 'all'"),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> list[OwnerProgressModel]:
    """Live routes with total and completed stop counts.

    Always answers 200; on failure the list is empty so the mobile view can
    still render.
    """
    try:
        return [OwnerProgressModel.from_domain(item) for item in aggregator.summarize(day)]
    except Exception as exc:
        logging.exception(f"Error building progress feed for '{day}': {exc}")
        return []
