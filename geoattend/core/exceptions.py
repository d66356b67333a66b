"""
Domain error taxonomy and global exception handlers.

Service code raises the domain errors below; the handlers registered on the
app turn them (and any unexpected failure) into structured JSON without
leaking stack traces.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Taxonomy ────────────────────────────────────────────────────────
class AttendanceAppError(Exception):
    """Base class for every recoverable domain error."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    message: str = "Request could not be processed"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(AttendanceAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class Unauthenticated(AttendanceAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    message = "Please authenticate."
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AttendanceAppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "Not authorized to perform this action"


class NotFound(AttendanceAppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "Resource not found"


class Conflict(AttendanceAppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


# Attendance
class MissingLocation(ValidationFailed):
    code = "missing_location"
    message = "Location data is required"


class OutsideGeofence(ValidationFailed):
    code = "outside_geofence"
    message = "You are outside office premises"


class AlreadyMarked(Conflict):
    code = "already_marked"
    message = "Attendance already recorded for today"


class NoEntryFound(Conflict):
    code = "no_entry_found"
    message = "No entry record found for today"


# WFH
class DuplicateRequest(Conflict):
    code = "duplicate_request"
    message = "A request already exists for this date"


class NoManagerAssigned(ValidationFailed):
    code = "no_manager_assigned"
    message = "No manager assigned"


class InvalidDecision(ValidationFailed):
    code = "invalid_decision"
    message = "Invalid status. Must be either Approved or Rejected"


class AlreadyProcessed(Conflict):
    code = "already_processed"
    message = "This request has already been processed"


# Tasks
class InvalidEmployee(ValidationFailed):
    code = "invalid_employee"
    message = "Invalid employee"


class AlreadyAssigned(Conflict):
    code = "already_assigned"
    message = "Task is already assigned to this employee"


class TaskNotPending(Conflict):
    code = "task_not_pending"
    message = "Task has already been completed"


class NotPendingReview(Conflict):
    code = "not_pending_review"
    message = "Task is not pending review"


# ── Handlers ────────────────────────────────────────────────────────
async def _app_error_handler(_request: Request, exc: AttendanceAppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "success": False},
        headers=exc.headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    # The rejected input is not echoed back; it may not be JSON-serialisable (NaN)
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"detail": errors, "code": "invalid_request", "success": False},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AttendanceAppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
