"""
HTTP middleware for the Book Catalog API.

Registered so that, from the outside in, requests pass CORS, correlation ids,
the error guard and then the auth gate before reaching a route.
"""

from fastapi import Request

from api.auth import authenticate_request
from api.errors import catalog_error_handler, unhandled_exception_handler
from catalog.exceptions import UnauthorizedError

PROTECTED_PREFIX = "/books"


def requires_credentials(path: str) -> bool:
    """Whether requests to ``path`` must carry valid Basic credentials."""
    return path == PROTECTED_PREFIX or path.startswith(PROTECTED_PREFIX + "/")


async def auth_gate_middleware(request: Request, call_next):
    """Reject unauthenticated book requests before their body is read."""
    if not requires_credentials(request.url.path):
        return await call_next(request)

    try:
        await authenticate_request(request)
    except UnauthorizedError as exc:
        return await catalog_error_handler(request, exc)

    return await call_next(request)


async def error_guard_middleware(request: Request, call_next):
    """Turn unexpected failures into the generic 500 payload inside CORS."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await unhandled_exception_handler(request, exc)
