"""Server configuration model for postman-mcp.

Captures postman-mcp.yaml fields with sensible defaults. The API key
itself is never read from the YAML file, only from the environment or
the set_credential tool.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

CONFIG_FILENAME = "postman-mcp.yaml"
API_KEY_ENV = "POSTMAN_API_KEY"
API_BASE_ENV = "POSTMAN_API_BASE"


class ServerConfig(BaseModel):
    """Server-level configuration loaded from postman-mcp.yaml."""

    model_config = {"extra": "forbid"}

    api_base: str = "https://api.getpostman.com"
    engine: str = "newman"
    newman_command: str = "newman"
    default_timeout_ms: int = Field(default=60000, ge=1)
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def find_config_root(start: Path | None = None) -> Path | None:
    """Walk up from start (default: cwd) looking for postman-mcp.yaml.

    Args:
        start: Starting path (file or directory). Defaults to cwd.

    Returns:
        The directory containing postman-mcp.yaml, or None if not found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while True:
        if (current / CONFIG_FILENAME).exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_server_config(config_path: Path | None = None) -> ServerConfig:
    """Load ServerConfig from YAML, then apply environment overrides.

    Args:
        config_path: Explicit path to a config file. If None, uses
            find_config_root() to locate postman-mcp.yaml.

    Returns:
        Validated ServerConfig instance (defaults when no file exists).
    """
    if config_path is None:
        root = find_config_root()
        config_path = root / CONFIG_FILENAME if root is not None else None

    raw: dict = {}
    if config_path is not None and config_path.exists():
        import yaml

        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

    config = ServerConfig.model_validate(raw)
    api_base = os.environ.get(API_BASE_ENV)
    if api_base:
        config = config.model_copy(update={"api_base": api_base})
    return config


def startup_api_key() -> str | None:
    """Return the startup credential from the environment, if any."""
    return os.environ.get(API_KEY_ENV) or None
