"""Process metrics and their Prometheus text rendering."""

from . import metrics, registry

__all__ = ["metrics", "registry"]
