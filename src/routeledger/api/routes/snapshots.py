"""Route run (snapshot) endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from ...errors import InvalidInput, InvalidSnapshot, SnapshotNotFound
from ...schemas.snapshots import CaptureRequest, RestoreRequest, RouteRunListResponse, RouteRunSummaryModel
from ...services.snapshots import SnapshotManager
from ..dependencies import get_snapshot_manager
from ..responses import INVALID_PAYLOAD, SERVER_ERROR, error_response, parse_payload

router = APIRouter(tags=["snapshots"])


@router.post("/captureSnapshot", status_code=status.HTTP_200_OK)
def capture_snapshot(
    payload: Any = Body(default=None),
    manager: SnapshotManager = Depends(get_snapshot_manager),
):
    """Save the current driver layout for a day as a route run."""
    request = parse_payload(CaptureRequest, payload)
    if request is None:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    try:
        result = manager.capture(request.day, request.mode, request.snapshot_id)
    except SnapshotNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "route run not found")
    except InvalidInput as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception as exc:
        logging.exception(f"Error saving route run: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"id": result.id, "message": result.message}


@router.post("/restoreSnapshot", status_code=status.HTTP_200_OK)
def restore_snapshot(
    payload: Any = Body(default=None),
    manager: SnapshotManager = Depends(get_snapshot_manager),
):
    """Roll the day's live assignments back to a saved route run."""
    request = parse_payload(RestoreRequest, payload)
    if request is None or not request.snapshot_id:
        return error_response(status.HTTP_400_BAD_REQUEST, "snapshotId required")
    try:
        owners_updated = manager.restore(request.snapshot_id)
    except SnapshotNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "route run not found")
    except InvalidSnapshot as exc:
        logging.warning(f"Route run {request.snapshot_id} cannot be applied: {exc}")
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid snapshot format")
    except InvalidInput:
        return error_response(status.HTTP_400_BAD_REQUEST, "snapshotId required")
    except Exception as exc:
        logging.exception(f"Error applying route run {request.snapshot_id}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"ok": True, "ownersUpdated": owners_updated}


@router.get("/snapshots", response_model=RouteRunListResponse, status_code=status.HTTP_200_OK)
def list_snapshots(
    day: str | None = Query(default=None, description="Weekday name or 'all'"),
    manager: SnapshotManager = Depends(get_snapshot_manager),
) -> RouteRunListResponse:
    """Most recent route runs for a day, newest first."""
    try:
        runs = manager.list_recent(day)
    except Exception as exc:
        logging.warning(f"Could not list route runs for '{day}': {exc}")
        runs = []
    return RouteRunListResponse(runs=[RouteRunSummaryModel(id=run_id, created_at=created) for run_id, created in runs])
