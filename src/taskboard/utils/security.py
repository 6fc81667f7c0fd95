"""Security utilities - id generation, password hashing, bearer tokens.

* :func:`generate_id` - prefixed, URL-safe random identifiers
* :class:`PasswordHasher` - bcrypt ``hash`` / ``verify``
* :class:`TokenIssuer` - HS256 JWT ``issue`` / ``resolve``

The service layer depends only on the boolean ``verify`` contract and on
``resolve`` returning a user id; token layout is private to this module.
"""
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from taskboard.core.exceptions import AuthenticationError
from taskboard.core.types import utcnow

logger = logging.getLogger(__name__)


def generate_id(prefix: str) -> str:
    """Generate a secure random identifier.

    Example:
        ```python
        generate_id("prj")
        # Returns: "prj-A1b2C3d4E5f6G7h8"
        ```
    """
    random_part = secrets.token_urlsafe(12)[:16]
    return f"{prefix}-{random_part}"


class PasswordHasher:
    """bcrypt password hashing.

    Args:
        rounds: bcrypt cost factor (use 4 in tests, 12+ in production)
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("ascii")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return ``True`` if *plaintext* matches *digest*.

        A malformed digest or an over-long password is a mismatch, not an
        error.
        """
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("ascii"))
        except ValueError as exc:
            logger.warning("Password verification rejected input: %s", exc)
            return False


class TokenIssuer:
    """Issue and resolve signed bearer tokens.

    Example payload::

        {
            "sub": "usr-A1b2C3d4E5f6G7h8",
            "iat": 1767225600,
            "exp": 1769817600
        }

    Attributes:
        secret: JWT signing secret
        algorithm: JWT signing algorithm
        ttl: Token lifetime
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("TokenIssuer requires a non-empty secret key.")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = self._clock()
        payload = {"sub": user_id, "iat": now, "exp": now + self.ttl}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def resolve(self, token: str) -> str:
        """Return the user id carried by *token*.

        Raises:
            AuthenticationError: If the token is malformed, tampered with,
                expired, or carries no subject.
        """
        # Log the internal reason, never expose it
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.warning("Token validation failed: %s", exc)
            raise AuthenticationError("Not authorized, token failed") from exc

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            logger.warning("Token missing subject claim")
            raise AuthenticationError("Not authorized, token failed")
        return user_id


__all__ = ["PasswordHasher", "TokenIssuer", "generate_id"]
