"""BaseEngine ABC and run options for collection execution engines.

An engine takes a collection document (and optional environment),
actually issues the HTTP requests it describes, evaluates its test
scripts and returns the full run summary.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from postman_mcp.models.summary import RunSummary

if TYPE_CHECKING:
    from postman_mcp.models.config import ServerConfig


@dataclass
class EngineRunOptions:
    """Scope and limits for a single engine run.

    scope restricts execution to the folder or item with that name.
    timeout_ms bounds each request, not the whole run.
    """

    scope: str | None = None
    timeout_ms: int = 60000
    iteration_count: int = 1


class BaseEngine(ABC):
    """Abstract base class for collection execution engines.

    Subclasses implement execute(). A run that completes with failing
    assertions is a normal result; only a run that cannot complete
    raises ExecutionError.
    """

    @classmethod
    def from_config(cls, config: ServerConfig) -> BaseEngine:
        """Build the engine from server settings. Defaults to ``cls()``."""
        return cls()

    @abstractmethod
    async def execute(
        self,
        collection: dict[str, Any],
        environment: dict[str, Any] | None,
        options: EngineRunOptions,
    ) -> RunSummary:
        """Run the collection and return the engine's run summary.

        Args:
            collection: Collection document as returned by the Postman API.
            environment: Optional environment document.
            options: Scope, per-request timeout and iteration count.

        Returns:
            The run summary (JSON mapping).

        Raises:
            ExecutionError: If the engine could not run the collection.
        """
        ...

    def engine_name(self) -> str:
        """Return the engine name. Defaults to the class name."""
        return type(self).__name__
