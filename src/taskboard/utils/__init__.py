"""Utility functions and helpers."""

from taskboard.utils.db_compat import (
    DbDialect,
    detect_dialect,
    requires_static_pool,
    serializes_writes,
)
from taskboard.utils.security import PasswordHasher, TokenIssuer, generate_id
from taskboard.utils.validation import (
    check_password,
    normalize_email,
    require_text,
    validate_email,
)

__all__ = [
    "DbDialect",
    "PasswordHasher",
    "TokenIssuer",
    "check_password",
    "detect_dialect",
    "generate_id",
    "normalize_email",
    "require_text",
    "requires_static_pool",
    "serializes_writes",
    "validate_email",
]
