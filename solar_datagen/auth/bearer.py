"""
Bearer token authentication for the admin routes.

When ADMIN_TOKEN is configured, every admin request must carry
``Authorization: Bearer <token>``; the comparison uses secrets.compare_digest
to avoid timing side channels. With no token configured the admin routes are
open, which matches a deployment behind a private network or an external
cron caller.

CHANGELOG:
- 2026-10-08: Initial creation
"""

import logging
import secrets

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)


def verify_bearer_token(token: str, expected: str) -> bool:
    """Compare a presented bearer token with the configured one in constant time."""
    if not token or not expected:
        return False
    return secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


class AdminAuth:
    """FastAPI-compatible admin token dependency.

    Attributes:
        token: The configured admin token; empty disables the check.
        scheme: FastAPI HTTPBearer security scheme.
    """

    def __init__(self, token: str) -> None:
        self.token = token
        self.scheme = HTTPBearer(auto_error=False)

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    async def verify(self, request: Request) -> None:
        """Validate the request's bearer token when a token is configured.

        Raises:
            HTTPException: 401 if the token is missing or wrong.
        """
        if not self.enabled:
            return

        credentials: HTTPAuthorizationCredentials | None = await self.scheme(request)
        if credentials is None:
            raise HTTPException(
                status_code=401,
                detail="Missing authorization credentials.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not verify_bearer_token(credentials.credentials, self.token):
            logger.warning("Rejected admin request with invalid token")
            raise HTTPException(
                status_code=401,
                detail="Invalid or expired token.",
                headers={"WWW-Authenticate": "Bearer"},
            )
