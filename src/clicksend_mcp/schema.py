"""Translate OpenAPI schema nodes into pydantic types.

Every schema node maps to a type annotation usable in a pydantic model:

- ``string`` -> ``str``, ``Literal[...]`` for enums, ``EmailStr`` for emails
- ``number``/``integer`` -> ``float``/``int`` with inclusive bounds
- ``boolean`` -> ``bool``
- ``array`` -> ``List[item]``
- ``object`` (or untyped with ``properties``) -> nested model
- untyped ``oneOf``/``anyOf`` -> ``Union[...]``
- ``$ref`` -> the translation of the referenced node

References are resolved against the owning document. A reference that cannot
be resolved never raises; it becomes ``Any`` carrying the pointer in its
description.
"""

from __future__ import annotations

import keyword
import logging
import re
from typing import Annotated, Any, Dict, FrozenSet, Iterable, List, Literal, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, create_model
from pydantic.fields import FieldInfo


logger = logging.getLogger(__name__)

MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=True)

_TYPED_KINDS = {"string", "number", "integer", "boolean", "array", "object"}
_RESERVED_NAMES = set(dir(BaseModel))

FieldDefinition = Tuple[Any, FieldInfo]


def resolve_reference(spec: Dict[str, Any], ref: str) -> Optional[Dict[str, Any]]:
    """Walk a local ``#/a/b/c`` pointer into ``spec``.

    Returns ``None`` (and logs a warning) when a segment is missing or the
    pointer is not local.
    """
    if not ref.startswith("#/"):
        logger.warning("Unsupported reference format: %s", ref)
        return None

    node: Any = spec
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or segment not in node:
            logger.warning("Failed to resolve reference: %s, segment: %s", ref, segment)
            return None
        node = node[segment]

    if not isinstance(node, dict):
        logger.warning("Reference does not point at a schema: %s", ref)
        return None
    return node


def schema_kind(schema: Optional[Dict[str, Any]]) -> str:
    if not schema:
        return "any"
    if "$ref" in schema:
        return "ref"
    schema_type = schema.get("type")
    if isinstance(schema_type, str) and schema_type in _TYPED_KINDS:
        return schema_type
    if "properties" in schema:
        return "object"
    if "oneOf" in schema or "anyOf" in schema:
        return "union"
    return "any"


def translate_schema(
    schema: Optional[Dict[str, Any]],
    spec: Dict[str, Any],
    model_name: str = "Schema",
    _seen: FrozenSet[str] = frozenset(),
) -> Tuple[Any, str]:
    """Return ``(annotation, description)`` for a schema node."""
    kind = schema_kind(schema)
    if kind == "any" or schema is None:
        return Any, (schema or {}).get("description", "")

    description = schema.get("description", "")

    if kind == "ref":
        return _translate_reference(schema["$ref"], spec, _seen)

    if kind == "string":
        if schema.get("enum"):
            return Literal[tuple(schema["enum"])], description
        if schema.get("format") == "email":
            return EmailStr, description
        if schema.get("format") == "uri":
            return str, f"URI: {description}"
        return str, description

    if kind in ("number", "integer"):
        base = int if kind == "integer" else float
        bounds: Dict[str, Any] = {}
        if schema.get("minimum") is not None:
            bounds["ge"] = schema["minimum"]
        if schema.get("maximum") is not None:
            bounds["le"] = schema["maximum"]
        if bounds:
            return Annotated[base, Field(**bounds)], description
        return base, description

    if kind == "boolean":
        return bool, description

    if kind == "array":
        item_type, _ = translate_schema(schema.get("items"), spec, f"{model_name}Item", _seen)
        return List[item_type], description  # type: ignore[valid-type]

    if kind == "object":
        properties = schema.get("properties")
        if not properties:
            return Dict[str, Any], description
        model = build_model(
            model_name,
            properties,
            schema.get("required") or [],
            spec,
            description=description,
            _seen=_seen,
        )
        return model, description

    branches = schema.get("oneOf") or schema.get("anyOf") or []
    members = tuple(
        translate_schema(branch, spec, f"{model_name}Option{index}", _seen)[0]
        for index, branch in enumerate(branches)
    )
    if not members:
        return Any, description
    return Union[members], description  # type: ignore[return-value]


def _translate_reference(ref: str, spec: Dict[str, Any], seen: FrozenSet[str]) -> Tuple[Any, str]:
    if ref in seen:
        logger.warning("Circular reference left unexpanded: %s", ref)
        return Any, f"Circular reference: {ref}"
    if not ref.startswith("#/"):
        logger.warning("Unsupported reference format: %s", ref)
        return Any, f"Unsupported reference: {ref}"

    referenced = resolve_reference(spec, ref)
    if referenced is None:
        return Any, f"Failed reference: {ref}"
    return translate_schema(referenced, spec, _model_name(ref.rsplit("/", 1)[-1]), seen | {ref})


def build_model(
    model_name: str,
    properties: Dict[str, Any],
    required: Iterable[str],
    spec: Dict[str, Any],
    description: str = "",
    _seen: FrozenSet[str] = frozenset(),
) -> type[BaseModel]:
    required_names = set(required)
    fields: Dict[str, FieldDefinition] = {}
    taken: Set[str] = set()

    for prop_name, prop_schema in properties.items():
        annotation, prop_description = translate_schema(
            prop_schema, spec, f"{model_name}{_model_name(prop_name)}", _seen
        )
        attribute, definition = field_definition(
            prop_name, annotation, prop_name in required_names, prop_description, taken
        )
        fields[attribute] = definition

    return create_model(  # type: ignore[call-overload]
        _model_name(model_name),
        __config__=MODEL_CONFIG,
        __doc__=description or None,
        **fields,
    )


def field_definition(
    name: str,
    annotation: Any,
    required: bool,
    description: str,
    taken: Set[str],
) -> Tuple[str, FieldDefinition]:
    """Declare one model field, optional fields default to ``None``.

    Names that cannot be model attributes keep the original name as alias.
    """
    attribute = attribute_name(name, taken)
    taken.add(attribute)

    kwargs: Dict[str, Any] = {"description": description or None}
    if attribute != name:
        kwargs["alias"] = name

    if required:
        return attribute, (annotation, Field(..., **kwargs))
    return attribute, (Optional[annotation], Field(None, **kwargs))


def attribute_name(name: str, taken: Set[str]) -> str:
    candidate = name
    if not _is_plain_attribute(candidate):
        candidate = re.sub(r"\W", "_", name).strip("_") or "field"
        if candidate[0].isdigit():
            candidate = f"f_{candidate}"
        if keyword.iskeyword(candidate) or candidate in _RESERVED_NAMES:
            candidate = f"{candidate}_"

    unique = candidate
    counter = 2
    while unique in taken:
        unique = f"{candidate}_{counter}"
        counter += 1
    return unique


def _is_plain_attribute(name: str) -> bool:
    return (
        name.isidentifier()
        and not keyword.iskeyword(name)
        and not name.startswith("_")
        and not name.startswith("model_")
        and name not in _RESERVED_NAMES
    )


def _model_name(name: str) -> str:
    parts = re.split(r"[^0-9A-Za-z]+", name)
    return "".join(part[:1].upper() + part[1:] for part in parts if part) or "Model"
