"""Translate SDK exceptions into JSON error responses."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from ..exceptions import (
    ApiError,
    InvalidInputError,
    Magi3DError,
    TaskError,
    UnsupportedOperationError,
)
from .schemas import describe_validation_errors

logger = structlog.get_logger(__name__)


def status_code_for(exc: Magi3DError) -> int:
    """Pick the HTTP status reported for ``exc``."""

    if isinstance(exc, (InvalidInputError, UnsupportedOperationError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ApiError):
        return exc.http_status or status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, TaskError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: Magi3DError) -> JSONResponse:
    """Materialise ``exc`` into the ``{"error": {code, message}}`` envelope."""

    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def magi3d_error_handler(_: Request, exc: Magi3DError) -> JSONResponse:
    """Convert :class:`Magi3DError` exceptions into JSON payloads."""

    response = error_response(exc)
    logger.info(
        "api.error",
        code=exc.code,
        status_code=response.status_code,
    )
    return response


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies with the same envelope as input errors."""

    return await magi3d_error_handler(
        request, InvalidInputError(f"Invalid request: {describe_validation_errors(list(exc.errors()))}")
    )


__all__ = [
    "error_response",
    "magi3d_error_handler",
    "request_validation_error_handler",
    "status_code_for",
]
