"""
Identity Token codec.

A token is a compact JWT (PyJWT, HMAC-SHA256 by default) whose `sub` claim
is the user id and whose `exp` claim is an absolute expiry. Verification is
all-or-nothing: any defect raises AuthenticationError and nothing from the
payload is trusted.
"""

import logging
import time
import uuid
from typing import Optional

import jwt

from mesto.config import Settings
from mesto.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class TokenCodec:
    """Signs and verifies identity tokens with a server-held secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 7 * 24 * 3600):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenCodec":
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            ttl_seconds=config.jwt_expires_seconds,
        )

    def issue(self, user_id: uuid.UUID, now: Optional[float] = None) -> str:
        """
        Produce a signed token for `user_id`.

        The caller is responsible for having checked that the user exists;
        the codec never looks at the store.
        """
        issued_at = int(now if now is not None else time.time())
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> uuid.UUID:
        """
        Return the user id carried by `token`.

        Raises:
            AuthenticationError: token missing, malformed, signed with another
                key, expired, or without a UUID `sub` claim.
        """
        if not token:
            raise AuthenticationError(context={"reason": "missing_token"})

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(context={"reason": "expired_token"})
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(context={"reason": type(e).__name__})

        try:
            return uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise AuthenticationError(context={"reason": "invalid_subject"})
