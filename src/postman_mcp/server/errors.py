"""Translate postman_mcp errors into MCP tool errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastmcp.exceptions import ToolError

from postman_mcp.errors import PostmanMCPError


def to_tool_error(exc: PostmanMCPError) -> ToolError:
    """Build a ToolError whose message starts with the error kind."""
    return ToolError(f"{exc.kind}: {exc}")


@contextmanager
def tool_errors() -> Iterator[None]:
    """Re-raise any PostmanMCPError raised inside the block as a ToolError."""
    try:
        yield
    except PostmanMCPError as exc:
        raise to_tool_error(exc) from exc
