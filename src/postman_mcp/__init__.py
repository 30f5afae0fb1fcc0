"""postman-mcp: Postman collection runs and resources over MCP."""

__version__ = "0.1.0"
