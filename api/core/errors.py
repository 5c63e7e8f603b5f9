"""
Exception handlers mapping failures onto HTTP status codes.

- request decode/shape problems -> 400
- store failures (query, transaction, connection) -> 500, message verbatim

Validation and not-found cases are raised as `HTTPException` by the
services themselves.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

STORE_ERRORS: tuple[type[Exception], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
)


def _format_location(loc: tuple | list) -> str:
    return ".".join(str(part) for part in loc)


def describe_validation_error(exc: RequestValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        where = _format_location(error.get("loc") or ())
        msg = str(error.get("msg") or "invalid value")
        messages.append(f"{where}: {msg}" if where else msg)
    return "; ".join(messages) or "Invalid request."


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": describe_validation_error(exc)},
    )


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("store_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    for exc_type in STORE_ERRORS:
        app.add_exception_handler(exc_type, store_error_handler)
