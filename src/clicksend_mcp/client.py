"""HTTP client for the ClickSend REST API."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ResponseParseError, UpstreamRequestError
from .logging import redact_payload


logger = logging.getLogger(__name__)

USER_AGENT = "clicksend-mcp-server/1.0"


class ClickSendClient:
    def __init__(
        self,
        base_url: str,
        username: str = "",
        api_key: str = "",
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "User-Agent": USER_AGENT}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=httpx.BasicAuth(self.username, self.api_key),
                headers=self._headers(),
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def execute(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        """Send one request and return the parsed JSON response."""
        method = method.upper()
        url = "/" + path.lstrip("/")
        content: Optional[str] = None
        if body is not None and method != "GET":
            content = json.dumps(body)

        logger.info(
            "ClickSend request %s %s body=%s",
            method,
            url,
            redact_payload(body) if isinstance(body, dict) else body,
        )
        try:
            response = await self._get_client().request(method, url, content=content)
        except httpx.HTTPError as exc:
            raise UpstreamRequestError(f"Request failed: {exc}") from exc

        raw = response.text
        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseParseError(f"Failed to parse response: {exc}") from exc

        logger.debug("ClickSend response %s: %s", response.status_code, raw)
        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("response_msg")
            raise UpstreamRequestError(
                f"API error: {message or raw}", status_code=response.status_code
            )
        return data

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
