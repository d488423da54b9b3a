"""
Error Handlers

Centralized exception handlers for the FastAPI application. Every error
body has the shape {"message": ..., "code": ..., "details": ...}.
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.errors import DomainError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)

REQUEST_PARTS = {"body", "query", "path", "header", "cookie"}


def _headers(extra: Dict[str, str] = None) -> Dict[str, str]:
    headers = {"X-Correlation-Id": get_correlation_id() or ""}
    if extra:
        headers.update(extra)
    return headers


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Human message naming the first offending field"""
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in REQUEST_PARTS)
    if not field:
        return "Invalid request body"
    if first.get("type") == "missing":
        return f"{field} is required"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Handle domain-specific errors (business logic errors).

    These are expected errors that occur during normal operation,
    such as validation failures, not found errors, permission denied, etc.
    """
    logger.warning(
        f"Domain error: {exc.error_code} - {exc.message}",
        extra={"action": request.url.path, "status": exc.http_status}
    )
    extra = None
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        extra = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
        headers=_headers(extra)
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    These occur when request data doesn't match expected schema.
    """
    errors = exc.errors()
    logger.warning(
        f"Validation error: {errors}, "
        f"path={request.url.path}, "
        f"method={request.method}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": describe_validation_errors(errors),
            "code": "VALIDATION_ERROR",
            "details": {"errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in errors
            ]}
        },
        headers=_headers()
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors such as unknown routes or wrong methods"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": str(exc.detail),
            "code": "HTTP_ERROR",
        },
        headers=_headers(getattr(exc, "headers", None))
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    These are unhandled exceptions that should not occur during normal operation.
    Logs full stack trace for debugging.
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        },
        headers=_headers()
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
