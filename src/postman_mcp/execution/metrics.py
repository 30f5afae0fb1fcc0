"""Project a run summary into a compact MetricsView.

Never raises for a well-formed JSON summary: every missing or
mistyped part falls back to an empty mapping, None or zero.
"""

from __future__ import annotations

from typing import Any

from postman_mcp.models.run import MetricsView
from postman_mcp.models.summary import RunSummary, dig, dig_mapping


def _timestamp(value: Any) -> int | float | str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        return value
    return None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def project_metrics(summary: RunSummary) -> MetricsView:
    """Derive the metrics view for a cached run summary.

    Reads ``run.stats``, ``run.transfers``, ``run.timings`` and
    ``run.failures`` from a Newman-shaped report.
    """
    run = dig_mapping(summary, "run")
    stats = dig_mapping(run, "stats")
    timings = dig_mapping(run, "timings")
    failures = run.get("failures")

    return MetricsView(
        assertions=dig_mapping(stats, "assertions"),
        iterations=dig_mapping(stats, "iterations"),
        requests=dig_mapping(stats, "requests"),
        test_scripts=dig_mapping(stats, "testScripts"),
        prerequest_scripts=dig_mapping(stats, "prerequestScripts"),
        transfers=dig_mapping(run, "transfers"),
        started=_timestamp(dig(timings, "started")),
        completed=_timestamp(dig(timings, "completed")),
        response_average=_number(dig(timings, "responseAverage")),
        failures=len(failures) if isinstance(failures, list) else 0,
    )
