"""Input validation helpers shared by the service layer.

The HTTP layer validates request shape; these helpers enforce the domain
rules the store depends on regardless of how an operation is invoked.
"""
from __future__ import annotations

import re

from taskboard.core.exceptions import InvalidInputError

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

_MAX_EMAIL_INPUT = 254  # RFC 5321 path limit; also caps regex input size

# bcrypt only looks at the first 72 bytes and recent releases reject longer input
MAX_PASSWORD_BYTES = 72


def validate_email(email: str) -> bool:
    """Return ``True`` if *email* looks like a deliverable address."""
    if not email or not isinstance(email, str):
        return False
    if len(email) > _MAX_EMAIL_INPUT:
        return False
    return bool(_EMAIL_RE.match(email))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def require_text(value: str | None, field: str) -> str:
    """Return *value* trimmed, or raise :class:`InvalidInputError` if empty."""
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise InvalidInputError(field, f"{field.capitalize()} is required")
    return cleaned


def check_password(password: str, min_length: int) -> None:
    """Raise :class:`InvalidInputError` unless *password* is acceptable."""
    if not isinstance(password, str) or len(password) < min_length:
        raise InvalidInputError(
            "password",
            f"Password must be at least {min_length} characters long",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidInputError(
            "password",
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
        )


__all__ = [
    "MAX_PASSWORD_BYTES",
    "check_password",
    "normalize_email",
    "require_text",
    "validate_email",
]
