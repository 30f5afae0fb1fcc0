"""postman-mcp execution - run keys, cache, metrics and the run service."""

from postman_mcp.execution.cache import RunCache
from postman_mcp.execution.metrics import project_metrics
from postman_mcp.execution.run_key import derive_run_key
from postman_mcp.execution.service import CollectionRunService

__all__ = [
    "CollectionRunService",
    "RunCache",
    "derive_run_key",
    "project_metrics",
]
