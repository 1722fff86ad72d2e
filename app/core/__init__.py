"""Core app configuration, database, passwords and tokens."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.tokens import SigningKey, SigningKeyError, TokenProvider

__all__ = [
    "get_settings",
    "settings",
    "get_db",
    "SigningKey",
    "SigningKeyError",
    "TokenProvider",
]
