"""Authenticated HTTP client for the Postman resource API.

Issues CRUD calls with the process-wide API key and normalizes every
failure into the postman_mcp.errors taxonomy. Stateless apart from the
credential and a lazily created httpx.AsyncClient.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from postman_mcp.errors import CredentialError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.getpostman.com"


def _upstream_message(response: httpx.Response) -> str | None:
    """Extract ``error.message`` from a Postman error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    return None


class PostmanClient:
    """Async client for api.getpostman.com.

    The API key may be supplied at construction or later through
    set_api_key(). Every request fails fast with CredentialError while
    no key is set.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or None
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_credential(self) -> bool:
        return self._api_key is not None

    def set_api_key(self, api_key: str) -> None:
        """Replace the process-wide credential used for every request."""
        self._api_key = api_key

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily initialize and return the httpx.AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: API path starting with '/', e.g. '/collections/abc'.
            payload: Optional JSON body.

        Returns:
            The decoded JSON object (empty dict for an empty body).

        Raises:
            CredentialError: If no API key is configured.
            NotFoundError: If the API answers 404.
            UpstreamError: On any other error status or transport failure.
        """
        if self._api_key is None:
            raise CredentialError()

        headers = {"X-API-Key": self._api_key, "Content-Type": "application/json"}
        try:
            response = await self._get_client().request(
                method, path, headers=headers, json=payload
            )
        except httpx.HTTPError as exc:
            logger.warning("Postman API %s %s failed: %s", method, path, exc)
            raise UpstreamError(f"Postman API request failed: {exc}") from exc

        if response.status_code == 404:
            message = _upstream_message(response) or f"Resource not found: {path}"
            raise NotFoundError(message)

        if response.is_error:
            message = _upstream_message(response) or (
                f"Postman API returned HTTP {response.status_code}"
            )
            logger.warning(
                "Postman API %s %s returned %d: %s",
                method,
                path,
                response.status_code,
                message,
            )
            raise UpstreamError(
                f"Postman API error: {message}", status_code=response.status_code
            )

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Postman API returned a non-JSON body",
                status_code=response.status_code,
            ) from exc
        if not isinstance(body, dict):
            return {"data": body}
        return body

    async def get(self, path: str) -> dict[str, Any]:
        return await self.request("GET", path)

    async def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", path, payload)

    async def put(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request("PUT", path, payload)

    async def delete(self, path: str) -> dict[str, Any]:
        return await self.request("DELETE", path)
