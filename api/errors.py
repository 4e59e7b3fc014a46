"""
Translation of failures into the uniform JSON error payload.

Domain exceptions are mapped to HTTP status codes through ``ERROR_STATUS``;
framework errors (request parsing, unknown routes) are reshaped into the same
payload, and anything unexpected becomes a 500 with a generic message.
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Dict, List, Optional, Type

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.auth import AUTH_REALM
from api.correlation import CORRELATION_ID_HEADER, get_correlation_id
from api.models import ErrorResponse
from catalog.exceptions import (
    CatalogError, ConflictError, NotFoundError, UnauthorizedError, ValidationError
)
from catalog.validation import FieldViolation

logger = structlog.get_logger(__name__)

ERROR_STATUS: Dict[Type[CatalogError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def status_for(exc: Exception) -> int:
    """HTTP status for an exception, 500 for anything not in ERROR_STATUS."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def build_error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[List[FieldViolation]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Build the uniform error response.

    Args:
        request: Request that failed
        status_code: HTTP status code to return
        message: Client-safe error message
        details: Field violations, for validation errors only
        headers: Extra response headers

    Returns:
        JSONResponse carrying an ErrorResponse body
    """
    correlation_id = get_correlation_id(request)
    payload = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status_code,
        error=_reason_phrase(status_code),
        message=message,
        path=request.url.path,
        correlation_id=correlation_id,
        details=details,
    )

    response_headers = dict(headers or {})
    if correlation_id:
        response_headers[CORRELATION_ID_HEADER] = correlation_id

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload, by_alias=True),
        headers=response_headers
    )


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle expected domain errors."""
    status_code = status_for(exc)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unmapped catalog error", error_type=type(exc).__name__, message=exc.message)
        return build_error_response(request, status_code, GENERIC_ERROR_MESSAGE)

    details = exc.violations if isinstance(exc, ValidationError) else None
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'}

    return build_error_response(request, status_code, exc.message, details=details, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request bodies and parameters the schema could not parse."""
    details = []
    for error in exc.errors():
        location = [
            str(part) for part in error.get("loc", ())
            if part not in ("body", "query", "path", "header")
        ]
        if error.get("type") == "json_invalid" or not location:
            field = "body"
        else:
            field = location[-1]
        details.append(FieldViolation(field=field, message=error.get("msg", "Invalid value")))

    logger.info("Request validation failed", fields=[detail.field for detail in details])
    return build_error_response(request, status.HTTP_400_BAD_REQUEST, "Validation failed", details=details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions such as unknown routes."""
    return build_error_response(
        request,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything unexpected without leaking its details to the client."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        path=request.url.path,
        correlation_id=get_correlation_id(request)
    )
    return build_error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install every error handler on ``app``."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
