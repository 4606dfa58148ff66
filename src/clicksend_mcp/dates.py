"""Natural-language date ranges for the SMS history endpoint."""

from __future__ import annotations

import logging
import re
from datetime import datetime, time
from typing import Any, Dict, List, Mapping, Optional, Tuple

import dateparser
from dateparser.search import search_dates

from .openapi import DATE_REQUEST_PARAM, HISTORY_PATH


logger = logging.getLogger(__name__)

DATE_FROM_PARAM = "date_from"
DATE_TO_PARAM = "date_to"

_PARSER_LANGUAGES = ["en"]
_PARSER_SETTINGS = {"PREFER_DATES_FROM": "past", "RETURN_AS_TIMEZONE_AWARE": False}

_RANGE_SEPARATOR = re.compile(
    r"\s+(?:to|until|till|through|thru|and)\s+|\s+-\s+|\s*–\s*", re.IGNORECASE
)
_RANGE_PREFIX = re.compile(r"^\s*(?:from|between)\s+", re.IGNORECASE)

_END_OF_DAY = time(23, 59, 59)


def resolve_date_range(path: str, query_values: Mapping[str, Any]) -> Dict[str, Any]:
    """Replace ``user_date_request`` with ``date_from``/``date_to`` seconds.

    The free-text field always wins over caller supplied bounds and is never
    forwarded. Returns a new mapping.
    """
    resolved = dict(query_values)
    if path != HISTORY_PATH or DATE_REQUEST_PARAM not in resolved:
        return resolved

    text = resolved.pop(DATE_REQUEST_PARAM)
    if not text:
        return resolved

    date_range = parse_date_range(str(text))
    if date_range is None:
        logger.info("No date recognized in %r, leaving date filters untouched", text)
        return resolved

    start, end = date_range
    resolved[DATE_FROM_PARAM] = start
    resolved[DATE_TO_PARAM] = end
    logger.info("Resolved %r to date_from=%s date_to=%s", text, start, end)
    return resolved


def parse_date_range(text: str) -> Optional[Tuple[int, int]]:
    """Parse free text into local ``(start_of_day, end_of_day)`` Unix seconds."""
    dates = _parse_dates(text)
    if not dates:
        return None

    start_day = dates[0]
    end_day = dates[1] if len(dates) > 1 else start_day
    start = datetime.combine(start_day.date(), time.min)
    end = datetime.combine(end_day.date(), _END_OF_DAY)
    return int(start.timestamp()), int(end.timestamp())


def _parse_dates(text: str) -> List[datetime]:
    cleaned = _RANGE_PREFIX.sub("", text.strip())
    parts = [part for part in _RANGE_SEPARATOR.split(cleaned) if part.strip()]

    if len(parts) >= 2:
        start = _parse_point(parts[0])
        end = _parse_point(parts[-1])
        if start and end:
            return [start, end]

    single = _parse_point(cleaned)
    if single is not None:
        return [single]

    found = search_dates(cleaned, languages=_PARSER_LANGUAGES, settings=_PARSER_SETTINGS) or []
    return [found_date for _, found_date in found[:2]]


def _parse_point(text: str) -> Optional[datetime]:
    parsed = dateparser.parse(text, languages=_PARSER_LANGUAGES, settings=_PARSER_SETTINGS)
    if parsed is not None:
        return parsed
    found = search_dates(text, languages=_PARSER_LANGUAGES, settings=_PARSER_SETTINGS)
    if found:
        return found[0][1]
    return None
