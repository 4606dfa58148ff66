"""Exception types raised by the ClickSend MCP server."""

from __future__ import annotations


class ClickSendMcpError(Exception):
    pass


class SpecLoadError(ClickSendMcpError):
    """The OpenAPI document could not be read or parsed."""


class MissingPathParameterError(ClickSendMcpError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Required path parameter '{name}' is missing")
        self.name = name


class UpstreamRequestError(ClickSendMcpError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseParseError(ClickSendMcpError):
    pass
