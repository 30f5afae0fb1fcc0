"""CollectionRunService: fetch, execute, cache and project collection runs.

Owns the run cache and the resource client for the lifetime of the
server process. Every operation validates its arguments before any
network or cache access and either returns a payload or raises a
single postman_mcp error.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from postman_mcp.engines.base import BaseEngine, EngineRunOptions
from postman_mcp.errors import ValidationError
from postman_mcp.execution.cache import RunCache
from postman_mcp.execution.metrics import project_metrics
from postman_mcp.execution.run_key import derive_run_key
from postman_mcp.models.run import DEFAULT_TIMEOUT_MS, MetricsView, RunRequest
from postman_mcp.models.summary import RunSummary
from postman_mcp.resources.client import PostmanClient
from postman_mcp.resources.fetchers import fetch_collection, fetch_environment

logger = logging.getLogger(__name__)


class CollectionRunService:
    """Runs Postman collections and serves their cached results.

    Args:
        client: Authenticated Postman API client.
        engine: Execution engine used for every run.
        cache: Run cache; a fresh one is created when omitted.
        default_timeout_ms: Per-request timeout when a run does not set one.
    """

    def __init__(
        self,
        client: PostmanClient,
        engine: BaseEngine,
        cache: RunCache | None = None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.client = client
        self.engine = engine
        self.cache = cache if cache is not None else RunCache()
        self.default_timeout_ms = default_timeout_ms

    def set_credential(self, api_key: str | None) -> None:
        """Replace the process-wide Postman API key.

        Affects every subsequent request made by this service and by
        the CRUD tools sharing its client.

        Raises:
            ValidationError: If api_key is empty.
        """
        if not api_key or not api_key.strip():
            raise ValidationError("apiKey is required")
        self.client.set_api_key(api_key.strip())
        logger.info("Postman API key updated")

    async def run_collection(
        self,
        collection_id: str | None,
        environment_id: str | None = None,
        scope: str | None = None,
        timeout_ms: int | None = None,
        iteration_count: int | None = None,
    ) -> dict[str, Any]:
        """Run a collection and cache its summary.

        Returns:
            ``{"key": <run key>, "metrics": <metrics view dict>}``.

        Raises:
            ValidationError: If arguments are missing or invalid.
            CredentialError: If no API key is configured.
            NotFoundError: If the collection or environment does not exist.
            UpstreamError: On other Postman API failures.
            ExecutionError: If the engine could not run; the cache is untouched.
        """
        request = RunRequest.build(
            collection_id=collection_id,
            environment_id=environment_id,
            scope=scope,
            timeout_ms=timeout_ms if timeout_ms is not None else self.default_timeout_ms,
            iteration_count=iteration_count,
        )
        return await self.execute(request)

    async def run_request(
        self,
        collection_id: str | None,
        item_name: str | None,
        environment_id: str | None = None,
        timeout_ms: int | None = None,
        iteration_count: int | None = None,
    ) -> dict[str, Any]:
        """Run a single named item of a collection.

        Raises:
            ValidationError: If collection_id or item_name is missing.
        """
        if not collection_id:
            raise ValidationError("collectionId is required")
        if not item_name or not item_name.strip():
            raise ValidationError("itemName is required")
        return await self.run_collection(
            collection_id,
            environment_id=environment_id,
            scope=item_name,
            timeout_ms=timeout_ms,
            iteration_count=iteration_count,
        )

    async def execute(self, request: RunRequest) -> dict[str, Any]:
        """Execute a validated RunRequest; see run_collection()."""
        collection = await fetch_collection(self.client, request.collection_id)
        environment = await fetch_environment(self.client, request.environment_id)

        key = derive_run_key(
            request.collection_id,
            environment_id=request.environment_id,
            scope=request.scope,
            iteration_count=request.iteration_count,
        )
        options = EngineRunOptions(
            scope=request.scope,
            timeout_ms=request.timeout_ms,
            iteration_count=request.iteration_count,
        )

        logger.info(
            "Running collection %s (key=%s, environment=%s, scope=%s, iterations=%d) with %s",
            request.collection_id,
            key,
            request.environment_id,
            request.scope,
            request.iteration_count,
            self.engine.engine_name(),
        )
        start = time.perf_counter()
        summary = await self.engine.execute(collection, environment, options)
        elapsed = time.perf_counter() - start

        self.cache.put(key, summary)
        metrics = project_metrics(summary)
        logger.info(
            "Run %s finished in %.2fs with %d failure(s)",
            key,
            elapsed,
            metrics.failures,
        )
        return {"key": key, "metrics": metrics.model_dump(mode="json")}

    def _require_key(self, key: str | None) -> str:
        if not key or not key.strip():
            raise ValidationError("key is required")
        return key.strip()

    def get_last_run_results(self, key: str | None) -> RunSummary:
        """Return the raw cached summary for key.

        Raises:
            ValidationError: If key is empty.
            NotFoundError: If nothing is cached under key.
        """
        return self.cache.get(self._require_key(key))

    def get_last_run_metrics(self, key: str | None) -> MetricsView:
        """Return the metrics view of the cached summary for key.

        Raises:
            ValidationError: If key is empty.
            NotFoundError: If nothing is cached under key.
        """
        return project_metrics(self.cache.get(self._require_key(key)))

    def list_runs(self) -> list[str]:
        """Return every run key currently cached."""
        return self.cache.keys()
