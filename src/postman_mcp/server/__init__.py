"""MCP tool surface for postman-mcp."""

from postman_mcp.server.app import build_service, create_server

__all__ = ["build_service", "create_server"]
