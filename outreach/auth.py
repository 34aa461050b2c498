"""
Authentication gate for the outreach routes.

Requests must carry `Authorization: Bearer <AUTH_TOKEN>`.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from outreach.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def verify_token(token: str, expected: str) -> bool:
    """Compare a presented token with the configured one in constant time."""
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    FastAPI dependency rejecting requests without a valid bearer token.

    Returns the accepted token.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Missing bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
        )

    if not verify_token(credentials.credentials, settings.AUTH_TOKEN):
        logger.warning("Invalid bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
        )

    return credentials.credentials
