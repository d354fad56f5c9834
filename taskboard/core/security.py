"""Security utilities for issuing and verifying identity tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskboard.core.config import settings
from taskboard.schemas.userSchema import Identity

logger = logging.getLogger(__name__)


class TokenCodec:
    """
    Encodes an identity into a signed, time-limited JWT and back.

    Args:
        secret (str): HMAC secret held by the server. Must be non-empty.
        algorithm (str): JWT signing algorithm.
        ttl (timedelta): Validity window measured from issuance.

    Raises:
        ValueError: If the secret is empty, so misconfiguration fails at startup.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        if not secret:
            raise ValueError("JWT secret is not configured")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """
        Creates a token for the given identity.

        The token carries the standard claims:
        - sub (user id)
        - iat (issued at time)
        - exp (issued at + ttl)

        Example:
            >>> codec = TokenCodec("s3cret")
            >>> codec.issue(Identity(id="u1", email="a@b.c"))
            'eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...'
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": identity.id,
            "email": identity.email,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[Identity]:
        """Verifies the token and returns its identity, or None when it is not valid."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.PyJWTError as e:
            logger.debug(f"Rejected token: {e}")
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            return None
        return Identity(id=user_id, email=email)


def build_token_codec() -> TokenCodec:
    """Codec configured from application settings."""
    return TokenCodec(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        ttl=timedelta(days=settings.TOKEN_EXPIRE_DAYS),
    )
