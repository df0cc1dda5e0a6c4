"""Error taxonomy shared by the route handlers and its HTTP mapping."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("arivelab.errors")


class PortalError(Exception):
    """Base class for errors that translate directly into an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(PortalError):
    """Raised when a write collides with an existing record (e.g. an email)."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED


class TokenError(AuthError):
    """The session token could not be verified."""


class TokenExpiredError(TokenError):
    pass


class ForbiddenError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND


def describe_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Flatten pydantic error details into one readable sentence."""

    parts = []
    for error in errors:
        location = [str(item) for item in error.get("loc", ()) if item not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        if location:
            parts.append(f"{'.'.join(location)}: {message}")
        else:
            parts.append(message)
    return "; ".join(parts) or "Invalid request"


def validation_error_from(exc: PydanticValidationError) -> ValidationError:
    return ValidationError(describe_validation_errors(exc.errors()))


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def install_error_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}`` with a matching status."""

    @app.exception_handler(PortalError)
    async def _portal_error(request: Request, exc: PortalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Unhandled portal error on %s %s: %s", request.method, request.url.path, exc)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, describe_validation_errors(exc.errors()))

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error while handling %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


__all__ = [
    "AuthError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "PortalError",
    "TokenError",
    "TokenExpiredError",
    "ValidationError",
    "describe_validation_errors",
    "install_error_handlers",
    "validation_error_from",
]
