"""Error envelope rendering.

Every failure leaves the API as
``{"error": {"code", "message", "details"?, "requestId"}}``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.savemate.core.errors import AppError, Internal, ValidationError

# Request locations that are not part of the field name shown to clients
_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})

_HTTP_STATUS_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "NOT_FOUND",
    409: "CONFLICT",
    429: "RATE_LIMITED",
}


def field_errors(errors: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error entries by dotted field path."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATIONS]
        field = ".".join(loc) or "_"
        grouped.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return grouped


def validation_error_from(errors: Iterable[Mapping[str, Any]]) -> ValidationError:
    return ValidationError(details={"fieldErrors": field_errors(errors)})


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "-"


def error_response(
    request: Request, error: AppError, headers: dict[str, str] | None = None
) -> JSONResponse:
    body: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
        "requestId": request_id_of(request),
    }
    if error.details is not None:
        body["details"] = error.details
    return JSONResponse(
        status_code=error.status_code, content={"error": body}, headers=headers
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("{}: {}", exc.code, exc.message)
    else:
        logger.info("{} {}: {}", exc.status_code, exc.code, exc.message)
    return error_response(request, exc, headers=exc.headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = validation_error_from(exc.errors())
    logger.info("400 VALIDATION_ERROR: {}", sorted(error.details["fieldErrors"]))
    return error_response(request, error)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = _HTTP_STATUS_CODES.get(exc.status_code, "INTERNAL")
    error = AppError(message=str(exc.detail), headers=getattr(exc, "headers", None))
    error.code = code
    error.status_code = exc.status_code
    return error_response(request, error, headers=error.headers)


def internal_error_response(request: Request) -> JSONResponse:
    return error_response(request, Internal())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
