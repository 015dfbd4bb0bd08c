"""Exception handlers that turn failures into the API's error envelope.

Every error response has the shape::

    {"success": false, "error": {"code": "...", "message": "...", "details": [...]}}

Remote-store failures map onto HTTP statuses so the UI can tell "the backend
said no" (404/422) from "the backend is unreachable" (502) and "this needs a
connection" (503). Internal details are only exposed when DEBUG is set.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from gms.config import settings
from gms.services.offline_actions import OfflineUnavailable
from gms.services.remote_store import NotFoundError, RemoteStoreError, ValidationRejected

logger = logging.getLogger(__name__)

# Starlette renamed its 422 constant; the number is stable across releases.
UNPROCESSABLE = 422

# Domain exceptions whose message is safe to show as-is.
_DOMAIN_ERRORS: dict[type[Exception], tuple[int, str, str]] = {
    NotFoundError: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "Not found."),
    ValidationRejected: (
        UNPROCESSABLE,
        "REJECTED",
        "Rejected by the workshop backend.",
    ),
    OfflineUnavailable: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "OFFLINE",
        "This action needs a connection.",
    ),
    ValueError: (status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", "Bad request."),
}


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: list | None = None,
) -> JSONResponse:
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def _field_errors(errors) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        }
        for err in errors
    ]


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request body, path or query."""
    return _error_response(
        UNPROCESSABLE,
        "VALIDATION_ERROR",
        "The request is invalid; see details.",
        _field_errors(exc.errors()),
    )


async def action_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """An action could not be built, e.g. a negative stock patch."""
    return _error_response(
        UNPROCESSABLE,
        "VALIDATION_ERROR",
        "The action is not well-formed.",
        _field_errors(exc.errors(include_url=False)),
    )


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    for exc_type, (status_code, code, fallback) in _DOMAIN_ERRORS.items():
        if isinstance(exc, exc_type):
            return _error_response(status_code, code, str(exc) or fallback)
    raise exc


async def remote_unavailable_handler(request: Request, exc: RemoteStoreError) -> JSONResponse:
    logger.error("Remote store failed on %s %s: %s", request.method, request.url.path, exc)
    message = f"Remote store error: {exc}" if settings.DEBUG else (
        "The workshop backend is unavailable. Please try again later."
    )
    return _error_response(status.HTTP_502_BAD_GATEWAY, "REMOTE_ERROR", message)


def _internal_error_handler(code: str, label: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s on %s %s: %s", label, request.method, request.url.path, exc, exc_info=exc
        )
        message = f"{label}: {exc}" if settings.DEBUG else (
            "Something went wrong on the shop-floor service. Please try again."
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, code, message)

    return handler


def register_error_handlers(app: FastAPI) -> None:
    from sqlalchemy.exc import SQLAlchemyError

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, action_validation_handler)
    for exc_type in _DOMAIN_ERRORS:
        app.add_exception_handler(exc_type, domain_error_handler)
    app.add_exception_handler(RemoteStoreError, remote_unavailable_handler)
    app.add_exception_handler(
        SQLAlchemyError, _internal_error_handler("DATABASE_ERROR", "Database error")
    )
    app.add_exception_handler(
        Exception, _internal_error_handler("INTERNAL_ERROR", "Unhandled exception")
    )
