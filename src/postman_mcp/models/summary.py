"""Safe access into semi-structured engine run summaries.

Only the parts read by the metrics projection are relied upon; the
rest of the summary is opaque passthrough.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# A run summary is the engine's JSON report, kept as decoded JSON.
RunSummary = dict[str, Any]


def dig(data: Any, *path: str, default: Any = None) -> Any:
    """Follow ``path`` through nested mappings, returning default on any gap.

    Example:
        dig(summary, "run", "stats", "assertions", default={})
    """
    current = data
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    if current is None:
        return default
    return current


def dig_mapping(data: Any, *path: str) -> dict[str, Any]:
    """Like dig(), but always returns a dict (empty unless a mapping is found)."""
    value = dig(data, *path)
    return dict(value) if isinstance(value, Mapping) else {}
