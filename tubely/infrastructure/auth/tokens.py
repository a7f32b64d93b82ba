"""
Bearer credential validation.

Access tokens are HS256 JWTs whose subject is the user's UUID. Validation
only answers "which user is this?"; whether that user may touch a given
video is decided by the ownership check in the pipeline.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

import jwt
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from ...core.media.errors import Unauthorized

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_ISSUER = "tubely-access"
DEFAULT_TOKEN_TTL = timedelta(hours=1)


def issue_token(
    user_id: UUID,
    secret: str,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    now: Optional[datetime] = None,
) -> str:
    """Sign an access token for user_id."""
    issued_at = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "iss": TOKEN_ISSUER,
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


class JWTCredentialValidator:
    """Validates bearer tokens and returns the user id they were issued to."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def validate(self, token: str) -> UUID:
        if not self._secret:
            raise Unauthorized("Token validation is not configured")

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=TOKEN_ISSUER,
                options={"require": ["exp", "iat", "sub", "iss"]},
            )
        except ExpiredSignatureError as e:
            raise Unauthorized("Token expired") from e
        except PyJWTInvalidTokenError as e:
            logger.warning("Invalid token", extra={"error": str(e)})
            raise Unauthorized("Invalid token") from e

        try:
            return UUID(payload["sub"])
        except (ValueError, TypeError) as e:
            raise Unauthorized("Token subject is not a user id") from e
