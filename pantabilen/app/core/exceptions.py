"""
Domain errors and the handlers that turn them into JSON responses.

Every error response has the same body:

    {"error_code": "...", "message": "...", "details": {...}}

`message` is shown to tenant admins as-is, so domain errors carry Swedish
text. Authentication and authorization failures are plain HTTPExceptions
raised by the dependencies in core/dependencies.py and core/guards.py.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base class for errors rendered by `app_exception_handler`."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """A value is outside its allowed range or otherwise unusable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: str = "ERR_VALIDATION_001"):
        super().__init__(message, error_code, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class RangeError(ValidationError):
    """A distance rule has an invalid range or a positive deduction."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, error_code="ERR_RANGE_001")


class ConflictError(AppException):
    """A change collides with existing state (e.g. overlapping distance rules)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: str = "ERR_CONFLICT_001"):
        super().__init__(message, error_code, status.HTTP_409_CONFLICT, details)


class InvalidStatusTransitionError(ConflictError):
    """A pickup order cannot take the requested transition from its current status."""

    def __init__(self, current_status: str, transition: str):
        super().__init__(
            message=f"Ogiltig statusövergång: '{transition}' från status '{current_status}'",
            details={"current_status": current_status, "transition": transition},
            error_code="ERR_STATUS_001"
        )


class PersistenceError(AppException):
    """The data store failed; the transaction was rolled back."""

    def __init__(self, message: str = "Kunde inte spara ändringarna", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "ERR_PERSISTENCE_001", status.HTTP_503_SERVICE_UNAVAILABLE, details)


class ResourceNotFoundError(AppException):
    """A tenant-scoped resource does not exist (or belongs to another tenant)."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} hittades inte"
        if resource_id is not None:
            message = f"{resource} {resource_id} hittades inte"
        super().__init__(
            message, "ERR_NOT_FOUND_001", status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


# Global Exception Handlers

HTTP_ERROR_CODES = {
    400: "ERR_BAD_REQUEST",
    401: "ERR_UNAUTHORIZED",
    403: "ERR_FORBIDDEN",
    404: "ERR_NOT_FOUND",
    405: "ERR_METHOD_NOT_ALLOWED",
    409: "ERR_CONFLICT",
}


def error_body(error_code: str, message: Any, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"error_code": error_code, "message": message, "details": details or {}}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render domain errors; store failures are logged, client errors are not."""
    if exc.status_code >= 500:
        logger.error("%s %s failed with %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error_code, exc.message, exc.details))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException (auth, guards, routing) in the common body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(HTTP_ERROR_CODES.get(exc.status_code, "ERR_UNKNOWN"), exc.detail),
        headers=getattr(exc, "headers", None)
    )


def jsonable_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Stringify pydantic error context, which may hold the raised exception."""
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(error)
    return cleaned


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/path/query validation failures."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "ERR_VALIDATION",
            "Kontrollera att alla värden är inom tillåtna intervall.",
            {"errors": jsonable_errors(exc.errors())}
        )
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, hide internals from the client."""
    logger.exception("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("ERR_INTERNAL_SERVER", "Ett oväntat fel inträffade")
    )
