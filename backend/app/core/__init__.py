"""Core utilities for the Parley backend."""

from .errors import register_exception_handlers
from .storage import resolve_path, store_user_avatar

__all__ = ["register_exception_handlers", "resolve_path", "store_user_avatar"]
