"""FastMCP server exposing Postman run and resource tools.

Tool argument names are camelCase to match the published tool schema.
Every tool either returns a JSON payload or raises a ToolError whose
message starts with the error kind.
"""

import logging
from typing import Annotated, Any
from urllib.parse import quote

from fastmcp import FastMCP
from pydantic import Field

from postman_mcp.engines.factory import build_engine
from postman_mcp.execution.service import CollectionRunService
from postman_mcp.models.config import ServerConfig, startup_api_key
from postman_mcp.resources.client import PostmanClient
from postman_mcp.resources.payloads import (
    build_documentation,
    build_endpoint_collection,
    build_environment,
    build_mock,
    build_workspace,
    require,
)
from postman_mcp.server.errors import tool_errors

logger = logging.getLogger(__name__)

SERVER_NAME = "postman-mcp"
SERVER_INSTRUCTIONS = (
    "Manage Postman collections, environments, workspaces and mocks, "
    "and run collections with Newman. Call set_credential first unless "
    "POSTMAN_API_KEY was set at startup."
)


def _path(prefix: str, resource_id: str) -> str:
    return f"{prefix}/{quote(resource_id, safe='')}"


def create_server(service: CollectionRunService) -> FastMCP:
    """Build the FastMCP server around an existing run service.

    The CRUD tools share the service's PostmanClient, so set_credential
    applies to them as well.
    """
    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    client = service.client

    # --- Credential ---

    @mcp.tool(
        description=(
            "Set the Postman API key used by every other tool. "
            "Replaces any key configured at startup."
        )
    )
    async def set_credential(
        apiKey: Annotated[str, Field(description="Postman API key (Settings > API keys)")],
    ) -> dict[str, Any]:
        with tool_errors():
            service.set_credential(apiKey)
        return {"configured": True}

    # --- Collection runs ---

    @mcp.tool(
        description=(
            "Run a Postman collection with Newman and cache the results. "
            "Returns a run key and metrics; the key can be used with "
            "get_last_run_results and get_last_run_metrics."
        )
    )
    async def run_collection(
        collectionId: Annotated[str, Field(description="ID of the collection to run")],
        environmentId: Annotated[str | None, Field(description="ID of the environment to use")] = None,
        scope: Annotated[str | None, Field(description="Folder or item name to restrict the run to")] = None,
        timeoutMs: Annotated[int | None, Field(ge=1, description="Per-request timeout in milliseconds (default 60000)")] = None,
        iterationCount: Annotated[int | None, Field(ge=1, description="Number of iterations (default 1)")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await service.run_collection(
                collectionId,
                environment_id=environmentId,
                scope=scope,
                timeout_ms=timeoutMs,
                iteration_count=iterationCount,
            )

    @mcp.tool(
        description="Run a single named request (or folder) of a Postman collection."
    )
    async def run_request(
        collectionId: Annotated[str, Field(description="ID of the collection")],
        itemName: Annotated[str, Field(description="Name of the request or folder to run")],
        environmentId: Annotated[str | None, Field(description="ID of the environment to use")] = None,
        timeoutMs: Annotated[int | None, Field(ge=1, description="Per-request timeout in milliseconds")] = None,
        iterationCount: Annotated[int | None, Field(ge=1, description="Number of iterations")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await service.run_request(
                collectionId,
                itemName,
                environment_id=environmentId,
                timeout_ms=timeoutMs,
                iteration_count=iterationCount,
            )

    @mcp.tool(description="Return the full cached run summary for a run key.")
    async def get_last_run_results(
        key: Annotated[str, Field(description="Run key returned by run_collection")],
    ) -> dict[str, Any]:
        with tool_errors():
            return service.get_last_run_results(key)

    @mcp.tool(description="Return the metrics of the cached run for a run key.")
    async def get_last_run_metrics(
        key: Annotated[str, Field(description="Run key returned by run_collection")],
    ) -> dict[str, Any]:
        with tool_errors():
            return service.get_last_run_metrics(key).model_dump(mode="json")

    @mcp.tool(description="List the run keys with cached results.")
    async def list_runs() -> list[str]:
        return service.list_runs()

    # --- Create ---

    @mcp.tool(
        description="Create a new collection holding a single request, with optional headers, body, auth and scripts."
    )
    async def create_endpoint(
        name: Annotated[str, Field(description="Request name")],
        method: Annotated[str, Field(description="HTTP method: GET, POST, PUT, DELETE, PATCH, HEAD or OPTIONS")],
        url: Annotated[str, Field(description="Request URL")],
        headers: Annotated[dict[str, str] | None, Field(description="Request headers")] = None,
        body: Annotated[dict[str, Any] | None, Field(description="Request body: mode, raw, urlencoded, formdata")] = None,
        auth: Annotated[dict[str, Any] | None, Field(description="Auth config: type plus apikey, basic or bearer")] = None,
        tests: Annotated[list[str] | None, Field(description="Test script lines")] = None,
        prerequest: Annotated[list[str] | None, Field(description="Pre-request script lines")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            payload = build_endpoint_collection(
                name, method, url, headers, body, auth, tests, prerequest
            )
            return await client.post("/collections", payload)

    @mcp.tool(description="Create a new Postman workspace.")
    async def create_workspace(
        name: Annotated[str, Field(description="Workspace name")],
        type: Annotated[str | None, Field(description="personal (default) or team")] = None,
        description: Annotated[str | None, Field(description="Workspace description")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await client.post("/workspaces", build_workspace(name, type, description))

    @mcp.tool(description="Create a new Postman environment.")
    async def create_environment(
        name: Annotated[str, Field(description="Environment name")],
        values: Annotated[list[dict[str, Any]] | None, Field(description="Variables: key, value, enabled")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await client.post("/environments", build_environment(name, values))

    @mcp.tool(description="Create a mock server for a collection.")
    async def create_mock_server(
        name: Annotated[str, Field(description="Mock server name")],
        collectionId: Annotated[str, Field(description="ID of the collection to mock")],
        environmentId: Annotated[str | None, Field(description="ID of the environment")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await client.post("/mocks", build_mock(name, collectionId, environmentId))

    @mcp.tool(description="Create documentation for a collection.")
    async def create_documentation(
        name: Annotated[str, Field(description="Documentation name")],
        collectionId: Annotated[str, Field(description="ID of the documented collection")],
        content: Annotated[str | None, Field(description="Documentation content (markdown)")] = None,
    ) -> dict[str, Any]:
        with tool_errors():
            return await client.post(
                "/collections", build_documentation(name, collectionId, content)
            )

    # --- Read ---

    @mcp.tool(description="List all available collections.")
    async def list_collections() -> list[dict[str, Any]]:
        with tool_errors():
            return (await client.get("/collections")).get("collections", [])

    @mcp.tool(description="List all available workspaces.")
    async def list_workspaces() -> list[dict[str, Any]]:
        with tool_errors():
            return (await client.get("/workspaces")).get("workspaces", [])

    @mcp.tool(description="List all available environments.")
    async def list_environments() -> list[dict[str, Any]]:
        with tool_errors():
            return (await client.get("/environments")).get("environments", [])

    @mcp.tool(description="Get the full document of a collection.")
    async def get_collection_details(
        collectionId: Annotated[str, Field(description="ID of the collection")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(collectionId=collectionId)
            body = await client.get(_path("/collections", collectionId))
            return body.get("collection", body)

    @mcp.tool(description="Get the full document of an environment.")
    async def get_environment_details(
        environmentId: Annotated[str, Field(description="ID of the environment")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(environmentId=environmentId)
            body = await client.get(_path("/environments", environmentId))
            return body.get("environment", body)

    # --- Update ---

    @mcp.tool(description="Replace a collection with a new collection document.")
    async def update_collection(
        collectionId: Annotated[str, Field(description="ID of the collection")],
        collection: Annotated[dict[str, Any], Field(description="Full collection document (info, item, ...)")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(collectionId=collectionId, collection=collection)
            return await client.put(
                _path("/collections", collectionId), {"collection": collection}
            )

    @mcp.tool(description="Replace an environment with a new environment document.")
    async def update_environment(
        environmentId: Annotated[str, Field(description="ID of the environment")],
        environment: Annotated[dict[str, Any], Field(description="Full environment document (name, values)")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(environmentId=environmentId, environment=environment)
            return await client.put(
                _path("/environments", environmentId), {"environment": environment}
            )

    # --- Delete ---

    @mcp.tool(description="Delete a collection.")
    async def delete_collection(
        collectionId: Annotated[str, Field(description="ID of the collection")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(collectionId=collectionId)
            return await client.delete(_path("/collections", collectionId))

    @mcp.tool(description="Delete an environment.")
    async def delete_environment(
        environmentId: Annotated[str, Field(description="ID of the environment")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(environmentId=environmentId)
            return await client.delete(_path("/environments", environmentId))

    @mcp.tool(description="Delete a workspace.")
    async def delete_workspace(
        workspaceId: Annotated[str, Field(description="ID of the workspace")],
    ) -> dict[str, Any]:
        with tool_errors():
            require(workspaceId=workspaceId)
            return await client.delete(_path("/workspaces", workspaceId))

    return mcp


def build_service(config: ServerConfig, api_key: str | None = None) -> CollectionRunService:
    """Create the run service described by config.

    Args:
        config: Loaded server configuration.
        api_key: Startup credential; falls back to POSTMAN_API_KEY.
    """
    api_key = api_key or startup_api_key()
    client = PostmanClient(
        api_key=api_key,
        base_url=config.api_base,
        timeout=config.http_timeout_seconds,
    )
    engine = build_engine(config)

    if api_key is None:
        logger.warning("No Postman API key configured; call set_credential first")
    logger.info("Using engine %s against %s", engine.engine_name(), config.api_base)
    return CollectionRunService(
        client, engine, default_timeout_ms=config.default_timeout_ms
    )
