"""
HTTP Basic authentication for the FastAPI API.
"""

import secrets
from typing import Dict, Optional

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from catalog.exceptions import UnauthorizedError

logger = structlog.get_logger(__name__)

AUTH_REALM = "books"

# Security scheme; missing credentials are reported by verify_credentials
security = HTTPBasic(realm=AUTH_REALM, auto_error=False)


class CredentialStore:
    """Static username/password pairs checked on every request."""

    def __init__(self, users: Dict[str, str]):
        if not users:
            raise ValueError("At least one username/password pair is required")
        self._users = dict(users)

    def authenticate(self, username: str, password: str) -> bool:
        """
        Check a username/password pair.

        Args:
            username: Supplied username
            password: Supplied password

        Returns:
            True if the pair matches a configured user, False otherwise
        """
        # Compare against a dummy password for unknown users so the timing
        # does not reveal which usernames exist.
        expected = self._users.get(username)
        candidate = expected if expected is not None else secrets.token_hex(16)
        matched = secrets.compare_digest(password.encode("utf-8"), candidate.encode("utf-8"))
        return expected is not None and matched

    @property
    def usernames(self):
        return sorted(self._users)


def check_credentials(request: Request, credentials: Optional[HTTPBasicCredentials]) -> str:
    """
    Verify parsed HTTP Basic credentials against the configured users.

    Args:
        request: Incoming request, used to reach the configured credential store
        credentials: Parsed Basic credentials, None if the header is missing

    Returns:
        The authenticated username

    Raises:
        UnauthorizedError: If credentials are missing or do not match
    """
    if credentials is None:
        logger.warning("Missing credentials", path=request.url.path)
        raise UnauthorizedError()

    credential_store: CredentialStore = request.app.state.credential_store
    if not credential_store.authenticate(credentials.username, credentials.password):
        logger.warning("Invalid credentials attempted", username=credentials.username, path=request.url.path)
        raise UnauthorizedError("Invalid username or password")

    structlog.contextvars.bind_contextvars(username=credentials.username)
    return credentials.username


async def authenticate_request(request: Request) -> str:
    """
    Authenticate a request straight from its Authorization header.

    Used before the request body is read, so a missing or bad header is
    reported even when the body could not be parsed.

    Raises:
        UnauthorizedError: If the header is missing, malformed or does not match
    """
    try:
        credentials = await security(request)
    except HTTPException:
        logger.warning("Malformed credentials", path=request.url.path)
        raise UnauthorizedError("Invalid authentication credentials")
    return check_credentials(request, credentials)


async def verify_credentials(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(security)
) -> str:
    """Route dependency returning the authenticated username."""
    return check_credentials(request, credentials)
