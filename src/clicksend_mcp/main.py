"""CLI entry point for the ClickSend MCP server."""

from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn

from .config import get_settings
from .errors import SpecLoadError
from .logging import configure_logging
from .server import build_client, build_server, http_app

logger = logging.getLogger(__name__)


async def _run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    client = build_client(settings)
    try:
        try:
            mcp = build_server(settings, client=client)
        except SpecLoadError as exc:
            logger.error("%s", exc)
            sys.exit(1)

        transport = settings.mcp_transport.lower()
        if transport in {"http", "streamable-http", "streamablehttp"}:
            config = uvicorn.Config(http_app(mcp), host=settings.mcp_host, port=settings.mcp_port)
            server = uvicorn.Server(config)
            await server.serve()
            return
        await mcp.run_stdio_async()
    finally:
        await client.aclose()


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
