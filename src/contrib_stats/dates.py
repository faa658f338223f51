"""Date parsing helpers for commit windows and weekly statistics."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from dateutil import parser as dtparse

_RELATIVE_RE = re.compile(r"^(\d+)([dwmy])$")
_RELATIVE_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}


def normalize_timestamp(value: str) -> str:
    """Parse a loosely formatted date and return it as ``YYYY-MM-DDTHH:MM:SSZ``.

    Accepts anything dateutil understands (``2020-01-01``,
    ``October 8 2019``, full ISO 8601 with offsets). Naive values are
    taken as UTC.

    Raises:
        ValueError: if the value cannot be parsed.
    """
    try:
        parsed = dtparse.parse(value)
    except (dtparse.ParserError, OverflowError) as exc:
        raise ValueError(f"Unrecognized date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def human_week_start(unix_seconds: int) -> str:
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def parse_relative_date(value: str) -> str | None:
    """Turn ``7d``/``2w``/``3m``/``1y`` into a ``YYYY-MM-DD`` date string."""
    match = _RELATIVE_RE.match(value)
    if not match:
        return None
    amount, unit = int(match.group(1)), match.group(2)
    return (datetime.now(timezone.utc) - timedelta(days=amount * _RELATIVE_DAYS[unit])).strftime("%Y-%m-%d")


def resolve_date(value: str | None) -> str | None:
    """Resolve a relative date, passing absolute dates through unchanged."""
    if value is None:
        return None
    return parse_relative_date(value) or value
