"""postman-mcp run -- execute one collection run from the terminal.

Loads the server config, runs the collection through the configured
engine, renders the metrics and exits with a code reflecting the
outcome.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from postman_mcp.cli.logging_setup import configure_logging
from postman_mcp.cli.output import output_json, render_metrics
from postman_mcp.errors import PostmanMCPError
from postman_mcp.models.config import ServerConfig, load_server_config
from postman_mcp.models.run import MetricsView
from postman_mcp.server.app import build_service

console = Console(stderr=True)

EXIT_PASS = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


def run(
    collection_id: str = typer.Argument(..., help="ID of the collection to run"),
    environment_id: Optional[str] = typer.Option(None, "-e", "--environment", help="Environment ID"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Folder or item name to run"),
    iterations: Optional[int] = typer.Option(None, "-n", "--iterations", min=1, help="Iteration count"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", min=1, help="Per-request timeout (ms)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to postman-mcp.yaml"),
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """Run a Postman collection once and display its metrics."""
    config = load_server_config(config_path)
    configure_logging(config.log_level)
    asyncio.run(
        _run_async(
            collection_id,
            config=config,
            environment_id=environment_id,
            scope=scope,
            iterations=iterations,
            timeout_ms=timeout_ms,
            format_json=format_json,
        )
    )


async def _run_async(
    collection_id: str,
    *,
    environment_id: str | None,
    scope: str | None,
    iterations: int | None,
    timeout_ms: int | None,
    config: ServerConfig,
    format_json: bool,
) -> None:
    """Async implementation of the run command."""
    try:
        service = build_service(config)
    except (ValueError, ImportError, TypeError) as exc:
        console.print(f"[bold red]Engine error:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_ERROR)

    try:
        result = await service.run_collection(
            collection_id,
            environment_id=environment_id,
            scope=scope,
            timeout_ms=timeout_ms,
            iteration_count=iterations,
        )
    except PostmanMCPError as exc:
        console.print(f"[bold red]{exc.kind}:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_ERROR)
    finally:
        await service.client.aclose()

    metrics = MetricsView.model_validate(result["metrics"])
    if format_json:
        output_json(result)
    else:
        render_metrics(result["key"], metrics, Console())

    if metrics.failures:
        raise typer.Exit(code=EXIT_FAILURES)
