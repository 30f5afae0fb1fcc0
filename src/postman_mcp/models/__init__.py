"""postman-mcp data models - re-exports all public model classes."""

from postman_mcp.models.config import ServerConfig, load_server_config
from postman_mcp.models.run import MetricsView, RunRequest

__all__ = [
    "MetricsView",
    "RunRequest",
    "ServerConfig",
    "load_server_config",
]
