"""Route tool arguments into an HTTP request."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from .errors import MissingPathParameterError
from .models import Operation, RequestDescriptor, RoutedParameters


SOURCE_FIELD = "source"
SOURCE_VALUE = "mcp"


def route_parameters(arguments: Mapping[str, Any], operation: Operation) -> RoutedParameters:
    remaining = dict(arguments)
    path_values: Dict[str, str] = {}

    for param in operation.parameters_in("path"):
        value = remaining.pop(param.name, None)
        if value is None or value == "":
            raise MissingPathParameterError(param.name)
        path_values[param.name] = quote(_to_text(value), safe="")

    query_names = {param.name for param in operation.parameters_in("query")}
    query_values: Dict[str, Any] = {}
    body_values: Dict[str, Any] = {}
    for key, value in remaining.items():
        if key in query_names:
            query_values[key] = value
        else:
            body_values[key] = value

    if operation.is_read:
        query_values.update(body_values)
        body_values = {}

    return RoutedParameters(path_values, query_values, body_values)


def build_path(template: str, path_values: Mapping[str, str]) -> str:
    """Substitute ``{name}`` placeholders with already encoded values."""
    path = template
    for name, value in path_values.items():
        path = path.replace(f"{{{name}}}", value)
    return path


def append_query(path: str, query_values: Mapping[str, Any]) -> str:
    if not query_values:
        return path

    pairs = [(key, _to_text(value)) for key, value in query_values.items() if value is not None]
    if not pairs:
        return path
    return f"{path}?{urlencode(pairs)}"


def build_body(
    body_values: Mapping[str, Any],
    method: str,
    message_field: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Attach the provenance marker to an outbound payload.

    When ``message_field`` names a list of records, each record is tagged
    instead of the payload itself.
    """
    if method.upper() == "GET":
        return None

    body = dict(body_values)
    if message_field is None:
        body[SOURCE_FIELD] = SOURCE_VALUE
        return body

    records = body.get(message_field)
    if isinstance(records, list):
        body[message_field] = [
            {**record, SOURCE_FIELD: SOURCE_VALUE} if isinstance(record, dict) else record
            for record in records
        ]
    return body


def build_request(
    operation: Operation,
    routed: RoutedParameters,
    message_field: Optional[str] = None,
) -> RequestDescriptor:
    path = append_query(build_path(operation.path, routed.path_values), routed.query_values)
    return RequestDescriptor(
        method=operation.method,
        path=path,
        body=build_body(routed.body_values, operation.method, message_field),
    )


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
