"""Session storage and import/export."""

from .base import SessionRepository
from .json_store import JsonSessionStore, SessionStoreError
from .session_transfer import SessionImportError

__all__ = [
    "SessionRepository",
    "JsonSessionStore",
    "SessionStoreError",
    "SessionImportError",
]
