"""
Volunteer Activities API Response Utilities
Standardized response format and error handling
"""
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List
from datetime import datetime

from .config import get_settings
from .logging_config import api_logger


def utc_timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: str = None, meta: Dict = None) -> Dict:
    """Create success response"""
    response = {
        "ok": True,
        "timestamp": utc_timestamp(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def created(data: Any, message: str = "Created successfully") -> Dict:
    """201 Created response"""
    return success(data, message)


def updated(data: Any = None, message: str = "Updated successfully") -> Dict:
    """200 Updated response"""
    return success(data, message)


def deleted(message: str = "Deleted successfully") -> Dict:
    """200 Deleted response"""
    return success(message=message)


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """Custom API exception with error codes"""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str = None,
        details: Dict = None,
    ):
        self.error_code = error_code or f"ERR_{status_code}"
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class QueryFailedError(Exception):
    """A read against the store failed."""


def bad_request(message: str, code: str = "BAD_REQUEST", details: Dict = None):
    raise ApiException(400, message, code, details)

def not_found(resource: str = "Resource", id: Any = None):
    message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
    raise ApiException(404, message, "NOT_FOUND")

def payload_too_large(message: str, details: Dict = None):
    raise ApiException(413, message, "FILE_TOO_LARGE", details)


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

def _error_body(message: str, error_code: str, **extra) -> Dict:
    body = {
        "ok": False,
        "error": message,
        "error_code": error_code,
        "timestamp": utc_timestamp(),
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def format_validation_errors(errors: List[Dict]) -> List[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return messages


async def api_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for ApiException and plain HTTP errors (including unknown routes)."""
    if isinstance(exc, ApiException):
        api_logger.warning(
            f"API Error: {exc.detail}",
            status_code=exc.status_code,
            error_code=exc.error_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.error_code, details=exc.details),
        )

    message = exc.detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"

    api_logger.warning(
        f"HTTP Error: {message}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_validation_errors(exc.errors())
    api_logger.warning(
        "Validation failed",
        path=request.url.path,
        errors=errors,
    )
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request data", "VALIDATION_ERROR", errors=errors),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    api_logger.warning(
        "Duplicate key",
        path=request.url.path,
        error_message=str(exc.orig),
    )
    return JSONResponse(
        status_code=400,
        content=_error_body("Duplicate field value entered", "DUPLICATE_KEY"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors; hides the detail in production."""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    error_code = "QUERY_FAILED" if isinstance(exc, QueryFailedError) else "INTERNAL_ERROR"
    if get_settings().is_production:
        message = "An unexpected error occurred"
    else:
        message = str(exc) or "Internal Server Error"
    return JSONResponse(
        status_code=500,
        content=_error_body(message, error_code),
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(StarletteHTTPException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(QueryFailedError, unhandled_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
