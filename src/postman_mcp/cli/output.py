"""Rich terminal output for collection run metrics.

Provides a key-value metrics table and pure JSON output for the
run command.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from postman_mcp.models.run import MetricsView

# Counter rows rendered in the table: (label, MetricsView attribute)
_COUNTER_ROWS: tuple[tuple[str, str], ...] = (
    ("Iterations", "iterations"),
    ("Requests", "requests"),
    ("Test scripts", "test_scripts"),
    ("Pre-request scripts", "prerequest_scripts"),
    ("Assertions", "assertions"),
)


def _format_counter(counter: dict[str, Any]) -> str:
    """Format an engine counter block, e.g. '5 total, 1 failed'."""
    if not counter:
        return "-"
    total = counter.get("total", 0)
    failed = counter.get("failed", 0)
    text = f"{total} total"
    if failed:
        text += f", [red]{failed} failed[/red]"
    pending = counter.get("pending", 0)
    if pending:
        text += f", {pending} pending"
    return text


def render_metrics(key: str, metrics: MetricsView, console: Console) -> None:
    """Render a compact metrics table for one run.

    Args:
        key: Run key the metrics belong to.
        metrics: Projected metrics of the run.
        console: Rich Console for output.
    """
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    if metrics.failures:
        table.add_row("Result", f"[bold red]✗ {metrics.failures} failure(s)[/bold red]")
    else:
        table.add_row("Result", "[bold green]✓ PASS[/bold green]")
    table.add_row("Run key", key)

    for label, attr in _COUNTER_ROWS:
        table.add_row(label, _format_counter(getattr(metrics, attr)))

    if metrics.response_average is not None:
        table.add_row("Avg response", f"{metrics.response_average:.1f}ms")
    response_total = metrics.transfers.get("responseTotal")
    if response_total is not None:
        table.add_row("Data received", f"{response_total} bytes")

    console.print(table)


def output_json(payload: dict[str, Any]) -> None:
    """Write the run payload as pure JSON to stdout."""
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")
