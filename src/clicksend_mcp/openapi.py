"""OpenAPI spec loader, operation index and input model builder."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml
from pydantic import BaseModel, create_model

from .errors import SpecLoadError
from .models import Operation, Parameter
from .schema import (
    MODEL_CONFIG,
    FieldDefinition,
    field_definition,
    resolve_reference,
    schema_kind,
    translate_schema,
)


logger = logging.getLogger(__name__)

HISTORY_PATH = "/v3/sms/history"
DATE_REQUEST_PARAM = "user_date_request"

BODY_CONTENT_TYPES = (
    "application/json",
    "multipart/form-data",
    "application/x-www-form-urlencoded",
)

_INVALID_ID_CHARS = re.compile(r"[^\w-]")
_REPEATED_DASHES = re.compile(r"-+")

_DATE_REQUEST_DESCRIPTION = (
    "[FOR AI AGENTS] When the user asks for dates in natural language "
    "(e.g. 'Aug 5 2025', 'yesterday', 'last Tuesday'), pass the EXACT original "
    "user wording here. The server converts it into date_from/date_to Unix "
    "timestamps, avoiding mistakes such as a wrong year. Overrides any "
    "date_from/date_to values supplied in the same call."
)


def load_spec(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON OpenAPI document and apply the date enrichment."""
    try:
        text = Path(path).read_text(encoding="utf-8")
        if Path(path).suffix == ".json":
            spec = json.loads(text)
        else:
            spec = yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Error loading OpenAPI spec %s: %s", path, exc)
        raise SpecLoadError(f"Error loading OpenAPI spec {path}: {exc}") from exc

    if not isinstance(spec, dict) or not isinstance(spec.get("paths"), dict):
        raise SpecLoadError(f"OpenAPI spec {path} has no 'paths' mapping")

    inject_date_request_parameter(spec)
    return spec


def inject_date_request_parameter(spec: Dict[str, Any]) -> bool:
    """Add the free-text date parameter to the history operation once.

    Returns True when the parameter was added.
    """
    operation = ((spec.get("paths") or {}).get(HISTORY_PATH) or {}).get("get")
    if not operation:
        return False

    parameters = operation.setdefault("parameters", [])
    if any(param.get("name") == DATE_REQUEST_PARAM for param in parameters):
        return False

    parameters.append(
        {
            "name": DATE_REQUEST_PARAM,
            "in": "query",
            "required": False,
            "schema": {"type": "string"},
            "description": _DATE_REQUEST_DESCRIPTION,
        }
    )
    return True


def lookup_operation(spec: Dict[str, Any], method: str, path: str) -> Optional[Operation]:
    raw = ((spec.get("paths") or {}).get(path) or {}).get(method.lower())
    if not isinstance(raw, dict):
        return None

    parameters = tuple(
        Parameter(
            name=param["name"],
            location=param.get("in", "query"),
            required=bool(param.get("required", False)),
            schema=param.get("schema") or {},
            description=param.get("description"),
        )
        for param in _operation_parameters(spec, raw)
    )
    return Operation(
        method=method.upper(),
        path=path,
        operation_id=derive_operation_id(method.upper(), path),
        summary=raw.get("summary") or "",
        parameters=parameters,
        request_body=raw.get("requestBody"),
    )


def _operation_parameters(spec: Dict[str, Any], raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    parameters: List[Dict[str, Any]] = []
    for param in raw.get("parameters") or []:
        if "$ref" in param:
            resolved = resolve_reference(spec, param["$ref"])
            if resolved is None:
                continue
            param = resolved
        if param.get("name") and param.get("in") in ("path", "query"):
            parameters.append(param)
    return parameters


def derive_operation_id(method: str, path: str) -> str:
    return _REPEATED_DASHES.sub("-", _INVALID_ID_CHARS.sub("-", f"{method}-{path}"))


def sanitize_tool_id(operation_id: str) -> str:
    return _INVALID_ID_CHARS.sub("-", operation_id).lower()


def build_input_model(operation: Operation, spec: Dict[str, Any]) -> type[BaseModel]:
    """Flatten path, query and body parameters into one pydantic model."""
    fields: Dict[str, FieldDefinition] = {}
    taken: Set[str] = set()
    model_name = _sanitize_name(operation.operation_id)

    for location in ("path", "query"):
        for param in operation.parameters_in(location):
            annotation, description = translate_schema(
                param.schema, spec, f"{model_name}_{param.name}"
            )
            attribute, definition = field_definition(
                param.name,
                annotation,
                param.required,
                param.description or description,
                taken,
            )
            fields[attribute] = definition

    body_schema = request_body_schema(operation, spec)
    if body_schema:
        required = set(body_schema.get("required") or [])
        for prop_name, prop_schema in (body_schema.get("properties") or {}).items():
            annotation, description = translate_schema(
                prop_schema, spec, f"{model_name}_{prop_name}"
            )
            attribute, definition = field_definition(
                prop_name, annotation, prop_name in required, description, taken
            )
            fields[attribute] = definition

    return create_model(  # type: ignore[call-overload]
        f"{model_name}Input", __config__=MODEL_CONFIG, **fields
    )


def request_body_schema(operation: Operation, spec: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    content = (operation.request_body or {}).get("content") or {}
    for content_type in BODY_CONTENT_TYPES:
        if content_type not in content:
            continue
        schema = (content[content_type] or {}).get("schema") or {}
        if "$ref" in schema:
            return resolve_reference(spec, schema["$ref"])
        return schema
    return None


def find_message_field(operation: Operation, spec: Dict[str, Any]) -> Optional[str]:
    """Name of the top-level body field holding a list of records, if any."""
    body_schema = request_body_schema(operation, spec)
    if not body_schema:
        return None
    for prop_name, prop_schema in (body_schema.get("properties") or {}).items():
        resolved = _follow_reference(prop_schema, spec)
        if schema_kind(resolved) != "array":
            continue
        items = _follow_reference(resolved.get("items"), spec)
        if schema_kind(items) == "object":
            return prop_name
    return None


def _follow_reference(schema: Optional[Dict[str, Any]], spec: Dict[str, Any]) -> Dict[str, Any]:
    seen: Set[str] = set()
    while schema and "$ref" in schema and schema["$ref"] not in seen:
        seen.add(schema["$ref"])
        schema = resolve_reference(spec, schema["$ref"])
    return schema or {}


def parse_endpoint(endpoint: str) -> Tuple[str, str]:
    method, _, path = endpoint.strip().partition(" ")
    return method.upper(), path.strip()


def _sanitize_name(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name)
