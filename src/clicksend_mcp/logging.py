"""Logging helpers with redaction."""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Dict


_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|password)", re.IGNORECASE)
_PHONE_KEYS = {"to", "from"}


def configure_logging(level: str) -> None:
    # stdout carries the stdio transport
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    redacted: Dict[str, Any] = {}
    for key, value in payload.items():
        if _SENSITIVE_KEYS.search(key):
            redacted[key] = "***REDACTED***"
        elif key in _PHONE_KEYS and isinstance(value, str) and len(value) > 4:
            redacted[key] = "*" * (len(value) - 4) + value[-4:]
        elif isinstance(value, dict):
            redacted[key] = redact_payload(value)
        elif isinstance(value, list):
            redacted[key] = [
                redact_payload(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            redacted[key] = value
    return redacted
