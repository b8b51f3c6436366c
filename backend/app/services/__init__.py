"""Application service helpers."""

from .cache import get_cache

__all__ = ["get_cache"]
