"""
Bearer token issuing and verification (PyJWT, HS256).

Tokens carry the user id as `sub` and the email address as `email`.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable

import jwt

from app.errors import UnauthorizedError
from app.utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRES_IN = timedelta(days=7)


class TokenService:
    def __init__(
        self,
        secret: str,
        expires_in: timedelta = DEFAULT_EXPIRES_IN,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._expires_in = expires_in
        self._clock = clock

    def issue(self, user_id: str, email: str) -> str:
        now = self._clock()
        payload = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        """Verified claims; raises UnauthorizedError for expired, forged or malformed tokens."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("JWT verification failed: %s", e)
            raise UnauthorizedError("Invalid token")

        if not payload.get("sub"):
            raise UnauthorizedError("Token missing subject")
        return payload
