"""Postman resource API access: client, fetchers and payload builders."""

from postman_mcp.resources.client import PostmanClient
from postman_mcp.resources.fetchers import fetch_collection, fetch_environment

__all__ = [
    "PostmanClient",
    "fetch_collection",
    "fetch_environment",
]
