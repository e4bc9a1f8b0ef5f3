"""Metric identifier construction."""

from typing import Optional

SEPARATOR = "."


def build_name(prefix: Optional[str], *components: Optional[str]) -> str:
    """
    Join an optional prefix and name components into a dotted identifier.

    Components are passed through verbatim. None and empty strings are
    skipped, so a missing prefix leaves the metric's own name untouched.

    Args:
        prefix: Global prefix (e.g., "web01.app"), may be None or empty
        components: Name components as registered

    Returns:
        str: Dotted identifier (e.g., "web01.app.requests")
    """
    parts = [part for part in (prefix, *components) if part]
    return SEPARATOR.join(parts)
