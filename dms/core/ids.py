"""Identifier generation for database rows."""

import secrets

# 9 random bytes -> 12 URL-safe characters (72 bits).
_ID_BYTES = 9


def new_id() -> str:
    """Return a fresh 12-character URL-safe identifier."""
    return secrets.token_urlsafe(_ID_BYTES)
