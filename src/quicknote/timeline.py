"""Multi-day timeline aggregation."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import pendulum

from .formats import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_TIMESTAMP_FORMAT,
    DateLike,
    format_moment,
    parse_moment,
    to_pendulum,
)
from .models.entry import Entry, InsertionPolicy, TimelineDay, TimelineWindow
from .parser import parse_entries

logger = logging.getLogger(__name__)

DEFAULT_TIMELINE_DAYS = 7

FetchDocument = Callable[[str], Optional[str]]


def day_keys(today: DateLike, day_count: int, date_format: str = DEFAULT_DATE_FORMAT) -> list[str]:
    """Keys for ``day_count`` days ending at ``today``, most recent first."""
    start = to_pendulum(today)
    return [format_moment(start.subtract(days=offset), date_format) for offset in range(day_count)]


def build_timeline(
    today: DateLike,
    day_count: int,
    date_format: str,
    fetch_document: FetchDocument,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    policy: InsertionPolicy | None = None,
    is_cancelled: Callable[[], bool] | None = None,
) -> TimelineWindow:
    """Collect entries from the last ``day_count`` daily notes.

    Days are ordered most recent first and never interleaved by timestamp.
    Within a day the newest entry comes first: document order is reversed
    when entries are appended at the bottom, and kept as-is for top-of-file
    and after-heading insertion where new lines already land first.

    Args:
        today: Last day of the window
        day_count: Number of calendar days to scan
        date_format: Moment-style format used for daily note keys
        fetch_document: Returns a daily note body by key, or None if absent
        timestamp_format: Moment-style format used for entry timestamps
        policy: Insertion policy the notes were written with (default bottom)
        is_cancelled: Checked before each fetch; once true, no more fetches

    Returns:
        TimelineWindow; ``complete`` is False if the build was cancelled
    """
    policy = policy or InsertionPolicy.bottom()
    days: list[TimelineDay] = []

    for date_key in day_keys(today, day_count, date_format):
        if is_cancelled is not None and is_cancelled():
            logger.debug("Timeline build cancelled before %s", date_key)
            return TimelineWindow(days=days, complete=False)

        body = fetch_document(date_key)
        if not body:
            continue

        entries = parse_entries(body, timestamp_format)
        if not entries:
            continue
        if policy.newest_last:
            entries.reverse()
        days.append(TimelineDay(date_key=date_key, entries=entries))

    logger.debug("Timeline built: %d day(s) with entries out of %d", len(days), day_count)
    return TimelineWindow(days=days)


def relative_time(
    date_key: str,
    timestamp: str,
    date_format: str = DEFAULT_DATE_FORMAT,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    now: DateLike | None = None,
) -> str:
    """Humanized age of an entry, e.g. ``"3 hours ago"``.

    Falls back to the literal ``"<date_key> <timestamp>"`` when the pair
    does not form a valid moment.
    """
    literal = f"{date_key} {timestamp}"
    reference = pendulum.now() if now is None else to_pendulum(now)
    if not isinstance(reference, pendulum.DateTime):
        reference = pendulum.datetime(reference.year, reference.month, reference.day)

    try:
        moment = parse_moment(literal, f"{date_format} {timestamp_format}", tz=reference.timezone or pendulum.UTC)
    except (ValueError, TypeError, OverflowError):
        return literal

    return pendulum.format_diff(moment.diff(reference), is_now=True)


def entry_display_time(
    date_key: str,
    entry: Entry,
    date_format: str = DEFAULT_DATE_FORMAT,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    now: DateLike | None = None,
) -> str:
    return relative_time(date_key, entry.timestamp, date_format, timestamp_format, now)
