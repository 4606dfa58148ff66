"""ClickSend MCP server generated from an OpenAPI document."""

__version__ = "1.0.0"
