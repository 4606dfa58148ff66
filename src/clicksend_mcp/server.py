"""MCP server setup for ClickSend."""

from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP
from starlette.responses import JSONResponse

from . import __version__
from .client import ClickSendClient
from .config import Settings
from .openapi import load_spec
from .tool_registry import ToolRegistry

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> ClickSendClient:
    if not settings.has_credentials():
        logger.warning("CLICKSEND_USERNAME / CLICKSEND_API_KEY not set; API calls will fail")
    return ClickSendClient(
        base_url=settings.clicksend_api_base_url,
        username=settings.clicksend_username,
        api_key=settings.clicksend_api_key,
        timeout_seconds=settings.clicksend_api_timeout_seconds,
    )


def build_server(settings: Settings, client: Optional[ClickSendClient] = None) -> FastMCP:
    """Load the OpenAPI document and register the allow-listed operations.

    Raises ``SpecLoadError`` when the document cannot be loaded.
    """
    spec = load_spec(settings.clicksend_spec_path)

    if client is None:
        client = build_client(settings)

    mcp = FastMCP(settings.service_name, instructions=_instructions(), version=__version__)
    registry = ToolRegistry(spec, client)
    names = registry.register(mcp, settings.endpoint_allowlist())
    logger.info("Registered %s ClickSend tools", len(names))
    return mcp


def http_app(mcp: FastMCP):  # type: ignore[no-untyped-def]
    app = mcp.http_app(transport="streamable-http", stateless_http=True, json_response=True)
    _attach_healthcheck(app)
    return app


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions() -> str:
    return (
        "ClickSend SMS tools generated from the ClickSend OpenAPI document. "
        "For message history, pass the user's own date wording in user_date_request."
    )
