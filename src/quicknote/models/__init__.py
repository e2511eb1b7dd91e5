"""Pydantic models for Quick Note."""

from .entry import Entry, InsertionKind, InsertionPolicy, TimelineDay, TimelineWindow
from .ledger import LedgerEvent, LedgerEventType
from .vault import AttachmentResult, Document, NoteResult, Notice

__all__ = [
    # Entries
    "Entry",
    "InsertionKind",
    "InsertionPolicy",
    "TimelineDay",
    "TimelineWindow",
    # Vault
    "Document",
    "Notice",
    "AttachmentResult",
    "NoteResult",
    # Ledger
    "LedgerEvent",
    "LedgerEventType",
]
