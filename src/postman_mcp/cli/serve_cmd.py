"""postman-mcp serve -- run the MCP server over stdio."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from postman_mcp.cli.logging_setup import configure_logging
from postman_mcp.models.config import load_server_config
from postman_mcp.server.app import build_service, create_server

logger = logging.getLogger(__name__)


def serve(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to postman-mcp.yaml"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    """Start the MCP server on stdio."""
    config = load_server_config(config_path)
    configure_logging(log_level or config.log_level)

    try:
        service = build_service(config)
    except (ValueError, ImportError, TypeError) as exc:
        typer.echo(f"Engine error: {exc}", err=True)
        raise typer.Exit(code=1)

    server = create_server(service)
    logger.info("Starting postman-mcp server on stdio")
    server.run()
