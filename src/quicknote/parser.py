"""Recover entries from daily note text.

The parser tolerates arbitrary prose, headings and user edits around entry
lines: anything that does not match the entry grammar is skipped.
"""

from __future__ import annotations

import json
import re
from functools import lru_cache

from .formats import DEFAULT_TIMESTAMP_FORMAT, format_to_regex
from .models.entry import Entry
from .writer import ATTACHMENT_MARKER_PREFIX, ATTACHMENT_MARKER_SUFFIX, decode_content

_MARKER_RE = re.compile(
    r"\s*" + re.escape(ATTACHMENT_MARKER_PREFIX) + r"(?P<payload>\[.*?\])"
    + re.escape(ATTACHMENT_MARKER_SUFFIX) + r"\s*$"
)


@lru_cache(maxsize=32)
def entry_line_pattern(timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT) -> re.Pattern[str]:
    """Compile the entry line regex for a timestamp format."""
    timestamp_re = format_to_regex(timestamp_format)
    return re.compile(rf"^\s*-\s+(?P<timestamp>{timestamp_re})\s+(?P<rest>.*)$")


def _split_attachments(rest: str) -> tuple[str, list[str]]:
    match = _MARKER_RE.search(rest)
    if not match:
        return rest, []
    try:
        paths = json.loads(match.group("payload"))
    except ValueError:
        return rest, []
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        return rest, []
    return rest[: match.start()], paths


def parse_line(line: str, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT) -> Entry | None:
    """Parse a single line, returning None if it is not an entry."""
    match = entry_line_pattern(timestamp_format).match(line.rstrip("\r"))
    if not match:
        return None

    content, attachments = _split_attachments(match.group("rest"))
    content = decode_content(content).strip()
    if not content and not attachments:
        return None
    return Entry(timestamp=match.group("timestamp"), content=content, attachments=attachments)


def parse_entries(body: str, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT) -> list[Entry]:
    """Parse all entry lines of a daily note, in document order."""
    entries: list[Entry] = []
    for line in body.split("\n"):
        entry = parse_line(line, timestamp_format)
        if entry is not None:
            entries.append(entry)
    return entries
