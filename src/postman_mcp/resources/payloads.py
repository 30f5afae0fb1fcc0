"""Request-body shaping for the Postman CRUD tools.

Each builder checks its required arguments and returns the JSON body
expected by the corresponding Postman API endpoint.
"""

from __future__ import annotations

from typing import Any

from postman_mcp.errors import ValidationError

COLLECTION_SCHEMA_URL = (
    "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
WORKSPACE_TYPES = ("personal", "team")


def require(**fields: Any) -> None:
    """Raise ValidationError naming every empty required field."""
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(f"Missing required arguments: {', '.join(missing)}")


def _script_event(listen: str, lines: list[str]) -> dict[str, Any]:
    return {
        "listen": listen,
        "script": {"type": "text/javascript", "exec": list(lines)},
    }


def build_endpoint_collection(
    name: str,
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
    auth: dict[str, Any] | None = None,
    tests: list[str] | None = None,
    prerequest: list[str] | None = None,
) -> dict[str, Any]:
    """Build a single-request collection body for POST /collections."""
    require(name=name, method=method, url=url)
    method = method.upper()
    if method not in HTTP_METHODS:
        raise ValidationError(
            f"Unsupported method '{method}'. Expected one of: {', '.join(HTTP_METHODS)}"
        )

    request: dict[str, Any] = {
        "method": method,
        "url": url,
        "header": [
            {"key": key, "value": value, "type": "text"}
            for key, value in (headers or {}).items()
        ],
    }
    if body:
        request["body"] = {
            "mode": body.get("mode", "raw"),
            "raw": body.get("raw", ""),
            "urlencoded": body.get("urlencoded", []),
            "formdata": body.get("formdata", []),
        }
    if auth:
        request["auth"] = {"type": auth.get("type")}
        for scheme in ("apikey", "basic", "bearer"):
            if auth.get(scheme):
                request["auth"][scheme] = auth[scheme]

    events = []
    if prerequest:
        events.append(_script_event("prerequest", prerequest))
    if tests:
        events.append(_script_event("test", tests))

    return {
        "collection": {
            "info": {"name": name, "schema": COLLECTION_SCHEMA_URL},
            "item": [{"name": name, "request": request, "event": events}],
        }
    }


def build_workspace(
    name: str, type: str | None = None, description: str | None = None
) -> dict[str, Any]:
    require(name=name)
    workspace_type = type or "personal"
    if workspace_type not in WORKSPACE_TYPES:
        raise ValidationError(
            f"Unsupported workspace type '{workspace_type}'. "
            f"Expected one of: {', '.join(WORKSPACE_TYPES)}"
        )
    return {
        "workspace": {
            "name": name,
            "type": workspace_type,
            "description": description or "",
        }
    }


def build_environment(
    name: str, values: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    require(name=name)
    return {"environment": {"name": name, "values": list(values or [])}}


def build_mock(
    name: str, collection_id: str, environment_id: str | None = None
) -> dict[str, Any]:
    require(name=name, collectionId=collection_id)
    mock: dict[str, Any] = {"name": name, "collection": collection_id}
    if environment_id:
        mock["environment"] = environment_id
    return {"mock": mock}


def build_documentation(
    name: str, collection_id: str, content: str | None = None
) -> dict[str, Any]:
    """Build a documentation collection body.

    The collection ID is only checked for presence; the Postman API
    creates documentation as a new collection carrying the description.
    """
    require(name=name, collectionId=collection_id)
    return {
        "collection": {
            "info": {
                "name": name,
                "description": content or "",
                "schema": COLLECTION_SCHEMA_URL,
            },
            "item": [],
        }
    }
