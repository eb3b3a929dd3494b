"""Line-oriented text codec for pomolog.

Session and settings records share one grammar: whitespace-separated
``key=value`` pairs. Values containing whitespace, quotes, backslashes or
``=`` are written as double-quoted strings with backslash escapes; bare
values run to the next whitespace. Timestamps are RFC 3339 with whole
seconds, durations are whole minutes, lists are comma-joined.
"""

from __future__ import annotations

import json
import math
import re
from datetime import datetime, timedelta

from pomolog.errors import DecodeError

_PAIR = re.compile(r'([^\s="]+)=("(?:[^"\\]|\\.)*"|[^\s"]*)(?=\s|$)')
_SPACE = re.compile(r"\s*")
_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)
_DURATION = re.compile(r"^(-?\d+(?:\.\d+)?)([A-Za-z]*)$")
_DURATION_UNITS = {"": 60.0, "m": 60.0, "s": 1.0, "h": 3600.0}
# Line breaks to str.splitlines() that json.dumps leaves unescaped.
_LINE_BREAKS = {"\x85": "\\u0085", "\u2028": "\\u2028", "\u2029": "\\u2029"}


class Quoted(str):
    """An attribute value that was written in double quotes."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return int(math.floor(value + 0.5))


# ── Attributes ────────────────────────────────────────────────


def parse_attributes(text: str) -> dict[str, str]:
    """Parse ``key=value`` pairs. Later duplicates win."""
    attrs: dict[str, str] = {}
    pos = _SPACE.match(text).end()
    while pos < len(text):
        m = _PAIR.match(text, pos)
        if not m:
            raise DecodeError(f"Malformed attribute: {text[pos:]!r}", text)
        key, raw = m.group(1), m.group(2)
        if raw.startswith('"'):
            try:
                attrs[key] = Quoted(json.loads(raw, strict=False))
            except json.JSONDecodeError as exc:
                raise DecodeError(f"Bad quoted value for {key!r}: {raw}", text) from exc
        else:
            attrs[key] = raw
        pos = _SPACE.match(text, m.end()).end()
    return attrs


def quote_value(value: str) -> str:
    if value == "" or any(c.isspace() or c in '"=\\' for c in value):
        quoted = json.dumps(value, ensure_ascii=False)
        for char, escape in _LINE_BREAKS.items():
            quoted = quoted.replace(char, escape)
        return quoted
    return value


def format_attributes(pairs: list[tuple[str, str]]) -> str:
    return " ".join(f"{key}={quote_value(value)}" for key, value in pairs)


# ── Values ────────────────────────────────────────────────────


def format_timestamp(value: datetime) -> str:
    """RFC 3339 with whole seconds; a zero offset is written as ``Z``."""
    if value.tzinfo is None:
        raise ValueError(f"Timestamp must be timezone-aware: {value!r}")
    s = value.replace(microsecond=0).isoformat()
    if value.utcoffset() == timedelta(0):
        s = s[:-6] + "Z"
    return s


def parse_timestamp(text: str) -> datetime:
    m = _RFC3339.match(text)
    if not m:
        raise DecodeError(f"Invalid RFC 3339 timestamp: {text!r}", text)
    day, clock, fraction, offset = m.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    micro = f".{fraction[:6].ljust(6, '0')}" if fraction else ""
    try:
        return datetime.fromisoformat(f"{day}T{clock}{micro}{offset}")
    except ValueError as exc:
        raise DecodeError(f"Invalid RFC 3339 timestamp: {text!r}", text) from exc


def format_minutes(value: timedelta) -> str:
    return str(round_half_up(value.total_seconds() / 60))


def parse_duration(text: str) -> timedelta:
    """Parse a duration: bare numbers are minutes, ``s``/``m``/``h`` suffixes allowed."""
    m = _DURATION.match(text)
    if not m:
        raise DecodeError(f"Invalid duration: {text!r}", text)
    number, unit = m.groups()
    if unit not in _DURATION_UNITS:
        raise DecodeError(f"Unknown duration unit {unit!r} in {text!r}", text)
    return timedelta(seconds=float(number) * _DURATION_UNITS[unit])


def parse_int(text: str) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise DecodeError(f"Invalid integer: {text!r}", text) from exc


def format_list(values: list[str]) -> str:
    return ",".join(values)


def parse_list(text: str) -> list[str]:
    """Split a comma list.

    A bare empty value is an empty list, a quoted one (``""``) is a single
    empty string, and ``"a,"`` is ``["a", ""]``.
    """
    if text == "":
        return [""] if isinstance(text, Quoted) else []
    return text.split(",")
