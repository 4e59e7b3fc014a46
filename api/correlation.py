"""
Per-request correlation ids.

Each request gets an id (the caller's ``X-Correlation-Id`` header, or a new
UUID), which is bound into the structlog context, echoed back in the response
header and attached to error payloads.
"""

import uuid
from typing import Optional

import structlog
from fastapi import Request

CORRELATION_ID_HEADER = "X-Correlation-Id"


def get_correlation_id(request: Request) -> Optional[str]:
    """Correlation id assigned to ``request``, if the middleware has run."""
    return getattr(request.state, "correlation_id", None)


async def correlation_id_middleware(request: Request, call_next):
    """Assign a correlation id and keep it in the log context for the request."""
    correlation_id = request.headers.get(CORRELATION_ID_HEADER, "").strip() or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        method=request.method,
        path=request.url.path,
    )
    try:
        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
    finally:
        structlog.contextvars.clear_contextvars()
