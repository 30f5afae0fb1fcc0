"""Read-only retrieval of the documents a run needs."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from postman_mcp.errors import UpstreamError
from postman_mcp.resources.client import PostmanClient


def _unwrap(body: dict[str, Any], field: str) -> dict[str, Any]:
    document = body.get(field)
    if not isinstance(document, dict):
        raise UpstreamError(f"Postman API response has no '{field}' document")
    return document


async def fetch_collection(client: PostmanClient, collection_id: str) -> dict[str, Any]:
    """Fetch a collection document by ID.

    Raises:
        NotFoundError: If the collection does not exist.
        UpstreamError: On any other API failure.
    """
    body = await client.get(f"/collections/{quote(collection_id, safe='')}")
    return _unwrap(body, "collection")


async def fetch_environment(
    client: PostmanClient, environment_id: str | None = None
) -> dict[str, Any] | None:
    """Fetch an environment document, or None when no ID is given."""
    if not environment_id:
        return None
    body = await client.get(f"/environments/{quote(environment_id, safe='')}")
    return _unwrap(body, "environment")
