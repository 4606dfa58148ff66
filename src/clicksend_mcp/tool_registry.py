"""Tool registry for the ClickSend MCP server."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Annotated, Any, Awaitable, Callable, Dict, Iterable, List, Optional

from fastmcp import FastMCP
from fastmcp.tools import Tool, ToolResult
from pydantic import BaseModel, Field, ValidationError
from pydantic.json_schema import SkipJsonSchema

from .client import ClickSendClient
from .dates import resolve_date_range
from .errors import ClickSendMcpError
from .logging import redact_payload
from .models import Operation
from .openapi import (
    build_input_model,
    find_message_field,
    lookup_operation,
    parse_endpoint,
    sanitize_tool_id,
)
from .routing import build_request, route_parameters


logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Awaitable[ToolResult]]


class OperationTool(Tool):
    """A tool whose arguments are validated against a generated input model."""

    input_model: Annotated[SkipJsonSchema[type[BaseModel]], Field(exclude=True)]
    handler: Annotated[SkipJsonSchema[ToolHandler], Field(exclude=True)]

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        try:
            payload = self.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            logger.warning("Invalid arguments for tool=%s: %s", self.name, exc)
            return error_result(f"Invalid arguments: {exc}")

        return await self.handler(payload.model_dump(mode="json", by_alias=True, exclude_unset=True))


class ToolRegistry:
    def __init__(self, spec: Dict[str, Any], client: ClickSendClient) -> None:
        self.spec = spec
        self.client = client

    def build_tools(self, endpoints: Iterable[str]) -> List[OperationTool]:
        tools: List[OperationTool] = []
        for endpoint in endpoints:
            method, path = parse_endpoint(endpoint)
            try:
                operation = lookup_operation(self.spec, method, path)
                if operation is None:
                    logger.warning("Could not match endpoint: %s %s in OpenAPI spec", method, path)
                    continue
                tools.append(self.build_tool(operation))
            except Exception as exc:
                logger.error("Failed to process endpoint %s: %s", endpoint, exc)
        return tools

    def build_tool(self, operation: Operation) -> OperationTool:
        input_model = build_input_model(operation, self.spec)
        message_field = find_message_field(operation, self.spec)
        return OperationTool(
            name=sanitize_tool_id(operation.operation_id),
            description=operation.summary or f"{operation.method} {operation.path}",
            parameters=input_model.model_json_schema(),
            input_model=input_model,
            handler=_tool_handler(self.client, operation, message_field),
        )

    def register(self, mcp: FastMCP, endpoints: Iterable[str]) -> List[str]:
        names: List[str] = []
        for tool in self.build_tools(endpoints):
            mcp.add_tool(tool)
            names.append(tool.name)
            logger.info("Registered tool: %s", tool.name)
        return names


def _tool_handler(
    client: ClickSendClient, operation: Operation, message_field: Optional[str]
) -> ToolHandler:
    async def handler(arguments: Dict[str, Any]) -> ToolResult:
        logger.info(
            "Executing %s %s arguments=%s",
            operation.method,
            operation.path,
            redact_payload(arguments),
        )
        try:
            routed = route_parameters(arguments, operation)
            routed = replace(
                routed, query_values=resolve_date_range(operation.path, routed.query_values)
            )
            request = build_request(operation, routed, message_field)
            result = await client.execute(request.method, request.path, request.body)
        except ClickSendMcpError as exc:
            logger.error("Tool execution failed: %s", exc)
            return error_result(str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure in %s %s", operation.method, operation.path)
            return error_result(str(exc) or exc.__class__.__name__)

        return ToolResult(
            content=(
                f"{request.method} {request.path} completed successfully:\n"
                f"{json.dumps(result, indent=2)}"
            )
        )

    return handler


def error_result(message: str) -> ToolResult:
    return ToolResult(content=f"Error: {message}", is_error=True)
