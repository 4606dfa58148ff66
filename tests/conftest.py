"""Shared fixtures for the ClickSend MCP tests.

HTTP traffic never leaves the process: the client is wired to an
``httpx.MockTransport`` that records every request and replays a canned
response.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Callable, List

import httpx
import pytest

from clicksend_mcp.client import ClickSendClient
from clicksend_mcp.config import BUNDLED_SPEC_PATH
from clicksend_mcp.openapi import load_spec


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it receives."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = status_code
        self.payload = {"response_code": "SUCCESS"} if payload is None else payload
        self.text = text
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


_BUNDLED_SPEC = load_spec(BUNDLED_SPEC_PATH)


@pytest.fixture
def spec() -> dict:
    """The bundled ClickSend document, already enriched."""
    return copy.deepcopy(_BUNDLED_SPEC)


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client() -> Callable[[httpx.MockTransport], ClickSendClient]:
    def _make(mock: httpx.MockTransport) -> ClickSendClient:
        return ClickSendClient(
            base_url="https://rest.clicksend.test",
            username="user",
            api_key="secret-key",
            transport=mock,
        )

    return _make


@pytest.fixture
def client(make_client, transport) -> ClickSendClient:
    return make_client(transport)
