"""Entry writer: places canonical entry lines into daily note text.

Everything here is pure. The caller reads the note, calls
``append_entry`` and writes the result back.
"""

import json
import re

from .models.entry import Entry, InsertionPolicy

ATTACHMENT_MARKER_PREFIX = "<!-- quicknote:attachments "
ATTACHMENT_MARKER_SUFFIX = " -->"
LINE_BREAK_TOKEN = "<br>"

_NEWLINES_RE = re.compile(r"\r\n|\r|\n")
# <br>, <br\>, <br\\> ... : each level of backslashes is one level of escaping
LINE_BREAK_RE = re.compile(r"<br(\\*)>")


def normalize_heading(heading: str | None) -> str:
    """Strip literal ``\\n`` tokens and surrounding whitespace from a heading."""
    if not heading:
        return ""
    return heading.replace("\\n", "").strip()


def resolve_insertion_policy(insert_at_bottom: bool, heading: str | None) -> InsertionPolicy:
    """Derive the insertion policy from the two user settings.

    An empty heading (after normalization) always means top of file when
    bottom insertion is off.
    """
    if insert_at_bottom:
        return InsertionPolicy.bottom()
    normalized = normalize_heading(heading)
    if normalized:
        return InsertionPolicy.after_heading(normalized)
    return InsertionPolicy.top_of_file()


def encode_attachments(paths: list[str]) -> str:
    """Render attachment paths as the trailing HTML-comment marker."""
    # ">" only occurs inside JSON strings, so escaping it keeps "-->" out of the payload
    payload = json.dumps(list(paths), ensure_ascii=False).replace(">", "\\u003e")
    return f"{ATTACHMENT_MARKER_PREFIX}{payload}{ATTACHMENT_MARKER_SUFFIX}"


def encode_content(content: str) -> str:
    """Fold line breaks so the entry stays on one line.

    A ``<br>`` the user typed is written as ``<br\\>`` (and ``<br\\>`` as
    ``<br\\\\>``) first, so ``decode_content`` can tell it from a folded
    line break.
    """
    escaped = LINE_BREAK_RE.sub(lambda m: f"<br\\{m.group(1)}>", content)
    return _NEWLINES_RE.sub(LINE_BREAK_TOKEN, escaped)


def decode_content(text: str) -> str:
    """Reverse ``encode_content``."""

    def _unfold(match: re.Match[str]) -> str:
        backslashes = match.group(1)
        if not backslashes:
            return "\n"
        return f"<br{backslashes[1:]}>"

    return LINE_BREAK_RE.sub(_unfold, text)


def format_entry_line(entry: Entry) -> str:
    """Format an entry as its canonical line (without trailing newline).

    Example:
        ``- 11:15 done``
        ``- 11:15 photo <!-- quicknote:attachments ["attachments/a.png"] -->``
    """
    content = encode_content(entry.content)
    line = f"- {entry.timestamp} {content}"
    if entry.attachments:
        marker = encode_attachments(entry.attachments)
        line = f"{line} {marker}" if content else f"{line}{marker}"
    return line


def _append_at_bottom(existing_body: str, line: str) -> str:
    if existing_body and not existing_body.endswith("\n"):
        existing_body += "\n"
    return existing_body + line + "\n"


def _insert_after_heading(existing_body: str, line: str, heading: str) -> str:
    if heading and heading in existing_body:
        lines = existing_body.split("\n")
        for index, candidate in enumerate(lines):
            if candidate.strip() == heading:
                lines.insert(index + 1, line)
                return "\n".join(lines)
    # Heading missing, or only present as a substring of some line
    return _append_at_bottom(existing_body, line)


def append_entry(existing_body: str, entry: Entry, policy: InsertionPolicy) -> str:
    """Compute the new note text with ``entry`` inserted per ``policy``.

    Args:
        existing_body: Current text of the daily note (may be empty)
        entry: Entry to insert
        policy: Where the entry line goes

    Returns:
        The full new note text
    """
    line = format_entry_line(entry)

    if policy.kind == "bottom":
        return _append_at_bottom(existing_body, line)
    if policy.kind == "after_heading":
        heading = normalize_heading(policy.heading)
        if not heading:
            return line + "\n" + existing_body
        return _insert_after_heading(existing_body, line, heading)
    return line + "\n" + existing_body
