"""Collection execution engines.

Re-exports the BaseEngine ABC, run options, the builtin Newman engine
and build_engine(), which picks the engine named in the server config.
"""

from postman_mcp.engines.base import BaseEngine, EngineRunOptions
from postman_mcp.engines.factory import build_engine
from postman_mcp.engines.newman_engine import NewmanEngine

__all__ = [
    "BaseEngine",
    "EngineRunOptions",
    "NewmanEngine",
    "build_engine",
]
