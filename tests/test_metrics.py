"""Tests for project_metrics and the summary access helpers."""

from __future__ import annotations

from typing import Any

from postman_mcp.execution.metrics import project_metrics
from postman_mcp.models.run import MetricsView
from postman_mcp.models.summary import dig, dig_mapping


def _make_summary(failures: Any = None) -> dict[str, Any]:
    """Build a Newman-shaped summary with realistic counters."""
    return {
        "collection": {"info": {"name": "Users API"}},
        "run": {
            "stats": {
                "iterations": {"total": 1, "pending": 0, "failed": 0},
                "items": {"total": 3, "pending": 0, "failed": 0},
                "scripts": {"total": 3, "pending": 0, "failed": 0},
                "prerequests": {"total": 3, "pending": 0, "failed": 0},
                "requests": {"total": 3, "pending": 0, "failed": 0},
                "tests": {"total": 3, "pending": 0, "failed": 0},
                "assertions": {"total": 6, "pending": 0, "failed": 1},
                "testScripts": {"total": 3, "pending": 0, "failed": 0},
                "prerequestScripts": {"total": 1, "pending": 0, "failed": 0},
            },
            "timings": {
                "responseAverage": 42.5,
                "responseMin": 10,
                "responseMax": 90,
                "started": 1700000000000,
                "completed": 1700000001500,
            },
            "transfers": {"responseTotal": 2048},
            "executions": [],
            "failures": failures if failures is not None else [
                {"error": {"name": "AssertionError", "test": "status is 200"}},
            ],
            "error": None,
        },
    }


class TestDig:
    """Tests for safe nested access."""

    def test_follows_path(self) -> None:
        assert dig({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1

    def test_missing_key_returns_default(self) -> None:
        assert dig({"a": {}}, "a", "b", default=7) == 7

    def test_non_mapping_in_path_returns_default(self) -> None:
        assert dig({"a": [1, 2]}, "a", "b") is None

    def test_none_value_returns_default(self) -> None:
        assert dig({"a": None}, "a", default={}) == {}

    def test_dig_mapping_rejects_non_mappings(self) -> None:
        assert dig_mapping({"a": 5}, "a") == {}
        assert dig_mapping({"a": {"x": 1}}, "a") == {"x": 1}


class TestProjectMetrics:
    """Tests for projecting a full summary."""

    def test_counters_pass_through(self) -> None:
        metrics = project_metrics(_make_summary())
        assert metrics.assertions == {"total": 6, "pending": 0, "failed": 1}
        assert metrics.iterations["total"] == 1
        assert metrics.requests["total"] == 3
        assert metrics.test_scripts["total"] == 3
        assert metrics.prerequest_scripts["total"] == 1
        assert metrics.transfers == {"responseTotal": 2048}

    def test_timings(self) -> None:
        metrics = project_metrics(_make_summary())
        assert metrics.started == 1700000000000
        assert metrics.completed == 1700000001500
        assert metrics.response_average == 42.5

    def test_failure_count_is_failures_length(self) -> None:
        failures = [{"error": {}}, {"error": {}}, {"error": {}}]
        assert project_metrics(_make_summary(failures)).failures == 3

    def test_failures_not_a_list_counts_zero(self) -> None:
        assert project_metrics(_make_summary({"oops": 1})).failures == 0

    def test_does_not_mutate_summary(self) -> None:
        summary = _make_summary()
        metrics = project_metrics(summary)
        metrics.assertions["total"] = 0
        assert summary["run"]["stats"]["assertions"]["total"] == 6


class TestProjectMetricsDefensive:
    """Projection never fails on partial summaries."""

    def test_missing_stats(self) -> None:
        summary = _make_summary()
        del summary["run"]["stats"]
        metrics = project_metrics(summary)
        assert metrics.assertions == {}
        assert metrics.iterations == {}
        assert metrics.requests == {}
        assert metrics.failures == 1

    def test_empty_summary(self) -> None:
        assert project_metrics({}) == MetricsView()

    def test_run_not_a_mapping(self) -> None:
        metrics = project_metrics({"run": "broken"})
        assert metrics.failures == 0
        assert metrics.started is None

    def test_mistyped_timings(self) -> None:
        summary = {"run": {"timings": {"responseAverage": "fast", "started": {"x": 1}}}}
        metrics = project_metrics(summary)
        assert metrics.response_average is None
        assert metrics.started is None

    def test_model_dump_is_json_ready(self) -> None:
        data = project_metrics({}).model_dump(mode="json")
        assert data["failures"] == 0
        assert data["assertions"] == {}
