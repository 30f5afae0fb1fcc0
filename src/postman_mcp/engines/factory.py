"""Build the execution engine selected by the server config.

``engine: newman`` in postman-mcp.yaml selects the builtin Newman
engine, run with ``newman_command``. Any other value is the dotted path
of a BaseEngine subclass importable by the server process, built
through its from_config() classmethod.
"""

from __future__ import annotations

import importlib

from postman_mcp.engines.base import BaseEngine
from postman_mcp.engines.newman_engine import NewmanEngine
from postman_mcp.models.config import ServerConfig

BUILTIN_ENGINES: dict[str, type[BaseEngine]] = {
    "newman": NewmanEngine,
}


def build_engine(config: ServerConfig) -> BaseEngine:
    """Instantiate the engine named by config.engine.

    Raises:
        ValueError: If config.engine is neither a builtin nor a dotted path.
        ImportError: If the engine's module cannot be imported.
        TypeError: If the path does not name a BaseEngine subclass, or the
            class cannot be built from the config.
    """
    engine_cls = resolve_engine_class(config.engine)
    try:
        return engine_cls.from_config(config)
    except TypeError as exc:
        raise TypeError(
            f"Engine '{config.engine}' could not be built from the server config: {exc}"
        ) from exc


def resolve_engine_class(name: str) -> type[BaseEngine]:
    """Map a config engine value to its BaseEngine subclass."""
    if name in BUILTIN_ENGINES:
        return BUILTIN_ENGINES[name]

    module_path, _, class_name = name.rpartition(".")
    if not module_path or not class_name:
        builtins = ", ".join(sorted(BUILTIN_ENGINES))
        raise ValueError(
            f"Unknown engine '{name}'. Set engine to one of: {builtins}, "
            f"or to the dotted path of a BaseEngine subclass."
        )

    module = importlib.import_module(module_path)
    engine_cls = getattr(module, class_name, None)
    if not isinstance(engine_cls, type) or not issubclass(engine_cls, BaseEngine):
        raise TypeError(f"Engine '{name}' does not name a BaseEngine subclass.")
    return engine_cls
