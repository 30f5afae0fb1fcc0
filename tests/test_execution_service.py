"""Tests for CollectionRunService with a mock engine and mocked Postman API."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from postman_mcp.engines.base import BaseEngine, EngineRunOptions
from postman_mcp.errors import (
    CredentialError,
    ExecutionError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from postman_mcp.execution.cache import RunCache
from postman_mcp.execution.run_key import derive_run_key
from postman_mcp.execution.service import CollectionRunService
from postman_mcp.resources.client import PostmanClient

COLLECTION = {"info": {"name": "Users API"}, "item": [{"name": "List users"}]}
ENVIRONMENTS = {
    "env1": {"name": "staging", "values": []},
    "env2": {"name": "production", "values": []},
}


class MockEngine(BaseEngine):
    """Engine returning a Newman-shaped summary built from the run options.

    Each call gets a distinct ``run.sequence`` so overwrites are visible.
    Set ``fail`` to make the next calls raise ExecutionError.
    """

    def __init__(self, failures: int = 0) -> None:
        self.calls: list[tuple[dict[str, Any], dict[str, Any] | None, EngineRunOptions]] = []
        self.failures = failures
        self.fail = False

    async def execute(
        self,
        collection: dict[str, Any],
        environment: dict[str, Any] | None,
        options: EngineRunOptions,
    ) -> dict[str, Any]:
        self.calls.append((collection, environment, options))
        if self.fail:
            raise ExecutionError("newman could not parse the collection")
        n = options.iteration_count
        return {
            "collection": collection,
            "environment": environment,
            "run": {
                "sequence": len(self.calls),
                "stats": {
                    "iterations": {"total": n, "pending": 0, "failed": 0},
                    "requests": {"total": n, "pending": 0, "failed": 0},
                    "assertions": {"total": 2 * n, "pending": 0, "failed": self.failures},
                },
                "timings": {"started": 1, "completed": 2, "responseAverage": 10},
                "failures": [{"error": {"name": "AssertionError"}}] * self.failures,
            },
        }

    def engine_name(self) -> str:
        return "MockEngine"


class PostmanAPI:
    """httpx handler serving one collection and two environments."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/collections/abc":
            return httpx.Response(200, json={"collection": COLLECTION})
        if path == "/collections/broken":
            return httpx.Response(500, json={"error": {"message": "Something went wrong"}})
        if path.startswith("/environments/"):
            env_id = path.rsplit("/", 1)[-1]
            if env_id in ENVIRONMENTS:
                return httpx.Response(200, json={"environment": ENVIRONMENTS[env_id]})
        return httpx.Response(404, json={"error": {"message": f"{path} not found"}})


def _make_service(
    engine: MockEngine | None = None, api_key: str | None = "PMAK-test"
) -> tuple[CollectionRunService, MockEngine, PostmanAPI]:
    api = PostmanAPI()
    engine = engine or MockEngine()
    client = PostmanClient(
        api_key=api_key,
        base_url="https://api.example.test",
        transport=httpx.MockTransport(api),
    )
    return CollectionRunService(client, engine), engine, api


class TestRunCollection:
    """Tests for run_collection."""

    @pytest.mark.asyncio
    async def test_returns_key_and_metrics(self) -> None:
        service, engine, _ = _make_service()
        result = await service.run_collection("abc")
        assert result["key"] == derive_run_key("abc")
        assert result["metrics"]["iterations"]["total"] == 1
        assert result["metrics"]["failures"] == 0

    @pytest.mark.asyncio
    async def test_defaults_passed_to_engine(self) -> None:
        service, engine, _ = _make_service()
        await service.run_collection("abc")
        collection, environment, options = engine.calls[0]
        assert collection == COLLECTION
        assert environment is None
        assert options == EngineRunOptions(scope=None, timeout_ms=60000, iteration_count=1)

    @pytest.mark.asyncio
    async def test_explicit_options_and_environment(self) -> None:
        service, engine, _ = _make_service()
        result = await service.run_collection(
            "abc", environment_id="env1", scope="Users", timeout_ms=500, iteration_count=3
        )
        _, environment, options = engine.calls[0]
        assert environment == ENVIRONMENTS["env1"]
        assert options == EngineRunOptions(scope="Users", timeout_ms=500, iteration_count=3)
        assert result["key"] == derive_run_key("abc", "env1", "Users", 3)
        assert result["metrics"]["iterations"]["total"] == 3

    @pytest.mark.asyncio
    async def test_service_default_timeout(self) -> None:
        api = PostmanAPI()
        engine = MockEngine()
        client = PostmanClient(api_key="k", transport=httpx.MockTransport(api))
        service = CollectionRunService(client, engine, default_timeout_ms=1234)
        await service.run_collection("abc")
        assert engine.calls[0][2].timeout_ms == 1234

    @pytest.mark.asyncio
    async def test_timeout_does_not_change_key(self) -> None:
        service, _, _ = _make_service()
        first = await service.run_collection("abc", timeout_ms=100)
        second = await service.run_collection("abc", timeout_ms=9000)
        assert first["key"] == second["key"]

    @pytest.mark.asyncio
    async def test_distinct_environments_distinct_keys(self) -> None:
        service, _, _ = _make_service()
        first = await service.run_collection("abc", environment_id="env1")
        second = await service.run_collection("abc", environment_id="env2")
        assert first["key"] != second["key"]
        assert sorted(service.list_runs()) == sorted([first["key"], second["key"]])

    @pytest.mark.asyncio
    async def test_failure_count_reported(self) -> None:
        service, _, _ = _make_service(MockEngine(failures=2))
        result = await service.run_collection("abc")
        assert result["metrics"]["failures"] == 2
        assert result["metrics"]["assertions"]["failed"] == 2


class TestRunCollectionErrors:
    """Error paths of run_collection."""

    @pytest.mark.asyncio
    async def test_missing_collection_id_makes_no_request(self) -> None:
        service, engine, api = _make_service()
        with pytest.raises(ValidationError, match="collectionId"):
            await service.run_collection(None)
        assert api.requests == []
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_invalid_iteration_count(self) -> None:
        service, _, api = _make_service()
        with pytest.raises(ValidationError, match="iteration_count"):
            await service.run_collection("abc", iteration_count=0)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_no_credential(self) -> None:
        service, engine, api = _make_service(api_key=None)
        with pytest.raises(CredentialError):
            await service.run_collection("abc")
        assert api.requests == []
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_collection_not_found(self) -> None:
        service, engine, _ = _make_service()
        with pytest.raises(NotFoundError):
            await service.run_collection("missing")
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_upstream_error(self) -> None:
        service, _, _ = _make_service()
        with pytest.raises(UpstreamError, match="Something went wrong"):
            await service.run_collection("broken")

    @pytest.mark.asyncio
    async def test_environment_failure_fails_whole_run(self) -> None:
        service, engine, _ = _make_service()
        with pytest.raises(NotFoundError):
            await service.run_collection("abc", environment_id="nope")
        assert engine.calls == []
        assert service.list_runs() == []

    @pytest.mark.asyncio
    async def test_execution_error_leaves_cache_untouched(self) -> None:
        service, engine, _ = _make_service()
        first = await service.run_collection("abc")
        before = service.get_last_run_results(first["key"])

        engine.fail = True
        with pytest.raises(ExecutionError):
            await service.run_collection("abc")
        assert service.get_last_run_results(first["key"]) is before

    @pytest.mark.asyncio
    async def test_execution_error_caches_nothing(self) -> None:
        service, engine, _ = _make_service()
        engine.fail = True
        with pytest.raises(ExecutionError):
            await service.run_collection("abc")
        assert service.list_runs() == []


class TestRunRequest:
    """Tests for run_request."""

    @pytest.mark.asyncio
    async def test_missing_item_name_makes_no_request(self) -> None:
        service, engine, api = _make_service()
        with pytest.raises(ValidationError, match="itemName"):
            await service.run_request("abc", None)
        with pytest.raises(ValidationError, match="itemName"):
            await service.run_request("abc", "  ")
        assert api.requests == []
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_missing_collection_id(self) -> None:
        service, _, api = _make_service()
        with pytest.raises(ValidationError, match="collectionId"):
            await service.run_request("", "List users")
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_scopes_run_to_item(self) -> None:
        service, engine, _ = _make_service()
        result = await service.run_request("abc", "List users", environment_id="env1")
        assert engine.calls[0][2].scope == "List users"
        assert result["key"] == derive_run_key("abc", "env1", "List users", 1)
        assert result["key"] == (
            await service.run_collection("abc", environment_id="env1", scope="List users")
        )["key"]


class TestCachedResults:
    """Tests for get_last_run_results / get_last_run_metrics."""

    @pytest.mark.asyncio
    async def test_round_trip(self) -> None:
        service, _, _ = _make_service(MockEngine(failures=1))
        result = await service.run_collection("abc")
        summary = service.get_last_run_results(result["key"])
        assert summary["run"]["sequence"] == 1
        metrics = service.get_last_run_metrics(result["key"])
        assert metrics.failures == len(summary["run"]["failures"])
        assert metrics.model_dump(mode="json") == result["metrics"]

    @pytest.mark.asyncio
    async def test_second_run_overwrites_first(self) -> None:
        service, _, _ = _make_service()
        first = await service.run_collection("abc", environment_id="env1")
        second = await service.run_collection("abc", environment_id="env1")
        assert first["key"] == second["key"]
        assert service.get_last_run_results(first["key"])["run"]["sequence"] == 2
        assert len(service.list_runs()) == 1

    def test_unknown_key_results(self) -> None:
        service, _, _ = _make_service()
        with pytest.raises(NotFoundError, match="no results for the given key"):
            service.get_last_run_results("run_999999")

    def test_unknown_key_metrics(self) -> None:
        service, _, _ = _make_service()
        with pytest.raises(NotFoundError):
            service.get_last_run_metrics("run_999999")

    def test_empty_key(self) -> None:
        service, _, _ = _make_service()
        with pytest.raises(ValidationError, match="key is required"):
            service.get_last_run_results("")

    def test_injected_cache_is_used(self) -> None:
        cache = RunCache()
        cache.put("run_42", {"run": {"failures": [{}]}})
        client = PostmanClient(api_key="k")
        service = CollectionRunService(client, MockEngine(), cache=cache)
        assert service.get_last_run_metrics("run_42").failures == 1

    def test_metrics_for_summary_without_stats(self) -> None:
        cache = RunCache()
        cache.put("run_7", {"run": {"failures": []}})
        service = CollectionRunService(PostmanClient(api_key="k"), MockEngine(), cache=cache)
        metrics = service.get_last_run_metrics("run_7")
        assert metrics.iterations == {}
        assert metrics.failures == 0


class TestSetCredential:
    """Tests for set_credential."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_key_rejected(self, value: str | None) -> None:
        service, _, _ = _make_service(api_key=None)
        with pytest.raises(ValidationError, match="apiKey is required"):
            service.set_credential(value)
        assert service.client.has_credential is False

    @pytest.mark.asyncio
    async def test_credential_enables_runs(self) -> None:
        service, _, api = _make_service(api_key=None)
        service.set_credential("PMAK-later")
        await service.run_collection("abc")
        assert api.requests[0].headers["X-API-Key"] == "PMAK-later"
