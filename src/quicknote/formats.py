"""Moment-style date/time format helpers.

Daily note keys and entry timestamps are configured with moment-style
tokens (``YYYY-MM-DD``, ``HH:mm``). Rendering and parsing go through
pendulum, which understands the same tokens. ``format_to_regex`` derives the
pattern used to recognise a formatted value inside a line of text.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache
from typing import Union

import pendulum

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_TIMESTAMP_FORMAT = "HH:mm"

DateLike = Union[date, datetime]

# Longest tokens first so "YYYY" wins over "YY" and "MMMM" over "MM".
_TOKEN_PATTERNS: list[tuple[str, str]] = [
    ("YYYY", r"\d{4}"),
    ("MMMM", r"[^\W\d_]+"),
    ("dddd", r"[^\W\d_]+"),
    ("SSSSSS", r"\d{6}"),
    ("SSS", r"\d{3}"),
    ("MMM", r"[^\W\d_]{3,}\.?"),
    ("ddd", r"[^\W\d_]{2,}\.?"),
    ("DDDD", r"\d{3}"),
    ("YY", r"\d{2}"),
    ("MM", r"\d{2}"),
    ("DD", r"\d{2}"),
    ("Do", r"\d{1,2}(?:st|nd|rd|th)"),
    ("dd", r"[^\W\d_]{2}"),
    ("HH", r"\d{2}"),
    ("hh", r"\d{2}"),
    ("mm", r"\d{2}"),
    ("ss", r"\d{2}"),
    ("SS", r"\d{2}"),
    ("ZZ", r"[+-]\d{4}"),
    ("M", r"\d{1,2}"),
    ("D", r"\d{1,2}"),
    ("H", r"\d{1,2}"),
    ("h", r"\d{1,2}"),
    ("m", r"\d{1,2}"),
    ("s", r"\d{1,2}"),
    ("S", r"\d"),
    ("A", r"(?:AM|PM)"),
    ("a", r"(?:am|pm)"),
    ("Z", r"(?:Z|[+-]\d{2}:\d{2})"),
    ("X", r"\d+"),
    ("x", r"\d+"),
]


def to_pendulum(value: DateLike) -> pendulum.Date:
    """Return ``value`` as a pendulum Date/DateTime without shifting wall time."""
    if isinstance(value, (pendulum.DateTime, pendulum.Date)):
        return value
    if isinstance(value, datetime):
        return pendulum.instance(value)
    return pendulum.date(value.year, value.month, value.day)


def format_moment(value: DateLike, fmt: str) -> str:
    """Render a date or datetime with a moment-style format string."""
    return to_pendulum(value).format(fmt)


@lru_cache(maxsize=64)
def format_to_regex(fmt: str) -> str:
    """Translate a moment-style format into a regex source string.

    The result contains no capturing groups so it can be embedded in a
    larger pattern. Text inside ``[...]`` is matched literally, as are any
    characters that are not format tokens.

    >>> format_to_regex("HH:mm")
    '\\\\d{2}:\\\\d{2}'
    """
    parts: list[str] = []
    i = 0
    while i < len(fmt):
        if fmt[i] == "[":
            end = fmt.find("]", i + 1)
            if end != -1:
                parts.append(re.escape(fmt[i + 1 : end]))
                i = end + 1
                continue
        for token, pattern in _TOKEN_PATTERNS:
            if fmt.startswith(token, i):
                parts.append(pattern)
                i += len(token)
                break
        else:
            parts.append(re.escape(fmt[i]))
            i += 1
    return "".join(parts)


def parse_moment(text: str, fmt: str, tz=None) -> pendulum.DateTime:
    """Parse ``text`` against a moment-style format.

    Raises:
        ValueError: If the text does not match or is not a real calendar moment
    """
    if tz is None:
        tz = pendulum.UTC
    return pendulum.from_format(text, fmt, tz=tz)
