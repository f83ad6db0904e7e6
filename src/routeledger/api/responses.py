"""Helpers for the ``{"error": ...}`` response bodies."""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

INVALID_PAYLOAD = "invalid payload"
SERVER_ERROR = "server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def parse_payload(model: type[BaseModel], payload: Any) -> BaseModel | None:
    """Validate a raw JSON body; ``None`` means the body was unusable."""
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError:
        return None


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD)
