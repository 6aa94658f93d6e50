"""Application error taxonomy and its mapping onto HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Initialize logger
logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to API callers.

    ``message`` is what the caller sees. It must stay generic: underlying
    store errors are logged, never returned.
    """

    status_code = 500
    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = 401
    message = "You must be logged in"


class AuthenticationFailed(AppError):
    """Sign-in failed. One message whether the email or the password was wrong."""

    status_code = 401
    message = "Invalid email or password"


class EmailAlreadyRegistered(AppError):
    status_code = 400
    message = "This email is already registered"


class NotFound(AppError):
    """Entity absent *or* owned by someone else. The two are indistinguishable."""

    status_code = 404
    message = "Not found"


class NoteNotFound(NotFound):
    message = "Note not found"


class TagNotFound(NotFound):
    message = "Tag not found"


class DuplicateName(AppError):
    status_code = 409
    message = "Tag already exists"


class ValidationError(AppError):
    status_code = 422
    message = "Invalid input"


class PersistenceError(AppError):
    status_code = 500
    message = "Failed to save changes"


class OwnershipViolation(PersistenceError):
    """A write tried to attach a record to an owner other than the caller."""


class UploadRejected(AppError):
    status_code = 400
    message = "Upload rejected"


def failure_response(status_code: int, error: str, headers: dict | None = None) -> JSONResponse:
    """Build the uniform failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "error": error},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}

    logger.info(
        "request_failed",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
    )
    return failure_response(exc.status_code, exc.message, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return failure_response(422, "Invalid input")


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers that turn errors into ``{success: false, error}``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
