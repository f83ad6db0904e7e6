"""Stop assignment endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status

from ...errors import InvalidInput, OwnerNotFound, StopNotFound
from ...schemas.assignment import OwnerActionRequest, ReassignRequest, StopCompletionRequest
from ...services.assignment import AssignmentStore
from ..dependencies import get_assignment_store
from ..responses import INVALID_PAYLOAD, SERVER_ERROR, error_response, parse_payload

router = APIRouter(tags=["assignment"])


@router.post("/reassign", status_code=status.HTTP_200_OK)
def reassign(
    payload: Any = Body(default=None),
    store: AssignmentStore = Depends(get_assignment_store),
):
    """Move a stop to another driver for the day."""
    request = parse_payload(ReassignRequest, payload)
    if request is None:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    try:
        store.reassign(request.stop_key, request.target_owner_id, request.day)
    except StopNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "stop not found")
    except OwnerNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "owner not found")
    except InvalidInput:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    except Exception as exc:
        logging.exception(f"Error reassigning stop {request.stop_key}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"ok": True}


@router.post("/stops/complete", status_code=status.HTTP_200_OK)
def complete_stop(
    payload: Any = Body(default=None),
    store: AssignmentStore = Depends(get_assignment_store),
):
    """Mark a stop delivered (or undo it) from the mobile view."""
    request = parse_payload(StopCompletionRequest, payload)
    if request is None:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    try:
        stop = store.set_stop_completed(request.stop_id, request.completed)
    except StopNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "stop not found")
    except InvalidInput:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    except Exception as exc:
        logging.exception(f"Error updating completion of stop {request.stop_id}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"ok": True, "stop": {"id": stop.id, "completed": stop.completed}}


@router.post("/owners/reset", status_code=status.HTTP_200_OK)
def reset_owner(
    payload: Any = Body(default=None),
    store: AssignmentStore = Depends(get_assignment_store),
):
    """Remove every stop from one driver's route."""
    request = parse_payload(OwnerActionRequest, payload)
    if request is None:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    try:
        cleared = store.reset_owner(request.owner_id, request.day)
    except OwnerNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "owner not found")
    except InvalidInput:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    except Exception as exc:
        logging.exception(f"Error resetting owner {request.owner_id}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"ok": True, "stopsCleared": cleared}


@router.post("/owners/reverse", status_code=status.HTTP_200_OK)
def reverse_route(
    payload: Any = Body(default=None),
    store: AssignmentStore = Depends(get_assignment_store),
):
    request = parse_payload(OwnerActionRequest, payload)
    if request is None:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    try:
        reversed_count = store.reverse_route(request.owner_id, request.day)
    except OwnerNotFound:
        return error_response(status.HTTP_404_NOT_FOUND, "owner not found")
    except InvalidInput:
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
    except Exception as exc:
        logging.exception(f"Error reversing route of {request.owner_id}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR)
    return {"ok": True, "stopsReversed": reversed_count}
