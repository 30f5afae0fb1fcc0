"""In-memory run cache keyed by run key.

Holds the most recent run summary per key for the lifetime of the
owning service. No eviction, no history, no persistence. Writes are
last-write-wins.
"""

from __future__ import annotations

import logging

from postman_mcp.errors import NotFoundError
from postman_mcp.models.summary import RunSummary

logger = logging.getLogger(__name__)


class RunCache:
    """Mapping from run key to the latest run summary stored under it."""

    def __init__(self) -> None:
        self._entries: dict[str, RunSummary] = {}

    def put(self, key: str, summary: RunSummary) -> None:
        """Store summary under key, replacing any previous entry."""
        if key in self._entries:
            logger.debug("Overwriting cached run %s", key)
        self._entries[key] = summary

    def get(self, key: str) -> RunSummary:
        """Return the summary stored under key.

        Raises:
            NotFoundError: If no run has been cached under key.
        """
        try:
            return self._entries[key]
        except KeyError:
            raise NotFoundError(f"no results for the given key: {key}") from None

    def has(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
