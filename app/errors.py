"""
Application error taxonomy and FastAPI exception handlers.

Services raise AppError subclasses; the handlers below turn them into a
stable JSON body {"kind": ..., "detail": ...}. Unexpected exceptions become a
generic internal error so no stack trace or internal identifier reaches the
client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that are safe to show to API clients."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(AppError):
    # Duplicate email is reported as a bad request, matching the public API
    kind = "conflict"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class UnauthorizedError(AppError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ServiceUnavailableError(AppError):
    kind = "unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


class InternalError(AppError):
    pass


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.message},
        headers=headers,
    )


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Bad input is a 400 with the same body shape as every other error
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"kind": "validation", "detail": _first_validation_message(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"kind": InternalError.kind, "detail": InternalError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
