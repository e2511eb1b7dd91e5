"""Capture ledger: an append-only JSONL log of what Quick Note wrote.

One line per event in ``<vault>/.quicknote/ledger.jsonl``. The file is
never truncated or rewritten, so it doubles as an audit trail of every
note append and attachment save, including the failed ones.
"""

import json
import uuid
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from rich.console import Console

from .models.ledger import LedgerEvent, LedgerEventType

console = Console(stderr=True)


class LedgerWriter:
    """Appends capture events for one run of the CLI or service."""

    def __init__(self, ledger_path: Path, run_id: str | None = None):
        """Initialize ledger writer.

        Args:
            ledger_path: Path to ledger.jsonl file
            run_id: Groups the events of one run; a new uuid4 if None
        """
        self.ledger_path = ledger_path
        self.run_id = run_id or str(uuid.uuid4())

    def append_event(
        self,
        event_type: LedgerEventType,
        payload: dict,
        date_key: str | None = None,
    ) -> LedgerEvent:
        """Record one event and return it.

        Args:
            event_type: What happened (note appended, attachment reused, ...)
            payload: Event details such as the document path or error text
            date_key: Daily note the event belongs to, if any
        """
        event = LedgerEvent(
            event_id=str(uuid.uuid4()),
            run_id=self.run_id,
            ts=datetime.now(timezone.utc),
            event_type=event_type,
            date_key=date_key,
            payload=payload,
        )

        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.ledger_path, "a", encoding="utf-8") as f:
            f.write(event.model_dump_json() + "\n")

        return event


def _iter_events(ledger_path: Path) -> Iterator[LedgerEvent]:
    malformed_count = 0
    with open(ledger_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield LedgerEvent(**json.loads(line))
            except (json.JSONDecodeError, ValueError) as e:
                malformed_count += 1
                console.print(f"[yellow]Warning: Skipping malformed line: {e}[/yellow]")

    if malformed_count > 0:
        console.print(f"[yellow]Skipped {malformed_count} malformed line(s)[/yellow]")


def read_ledger_tail(
    ledger_path: Path,
    n: int = 20,
    date_key: str | None = None,
    event_types: Iterable[LedgerEventType] | None = None,
) -> list[LedgerEvent]:
    """Read the last N matching events, oldest first.

    Malformed lines are skipped with a warning on stderr.

    Args:
        ledger_path: Path to ledger.jsonl file
        n: Number of events to return
        date_key: Only events for this daily note
        event_types: Only events of these types

    Returns:
        Up to N LedgerEvent objects in file order
    """
    if not ledger_path.exists() or n <= 0:
        return []

    wanted_types = set(event_types) if event_types is not None else None
    tail: deque[LedgerEvent] = deque(maxlen=n)
    for event in _iter_events(ledger_path):
        if date_key is not None and event.date_key != date_key:
            continue
        if wanted_types is not None and event.event_type not in wanted_types:
            continue
        tail.append(event)
    return list(tail)
