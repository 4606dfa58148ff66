"""Internal models for operations and per-call request state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    required: bool = False
    schema: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None


@dataclass(frozen=True)
class Operation:
    method: str
    path: str
    operation_id: str
    summary: str = ""
    parameters: Tuple[Parameter, ...] = ()
    request_body: Optional[Dict[str, Any]] = None

    def parameters_in(self, location: str) -> Tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.location == location)

    @property
    def is_read(self) -> bool:
        return self.method == "GET"


@dataclass(frozen=True)
class RoutedParameters:
    path_values: Dict[str, str]
    query_values: Dict[str, Any]
    body_values: Dict[str, Any]


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    body: Optional[Any] = None
