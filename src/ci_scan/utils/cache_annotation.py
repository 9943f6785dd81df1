"""Marker for values served from a cache."""

from typing import Any

CACHED_MARKER = " (cached)"


def cached_indication_str(value: Any) -> str:
    """Return CACHED_MARKER for truthy values, an empty string otherwise."""
    return CACHED_MARKER if value else ""
