"""Error types for Quick Note.

Defined in one place so storage, service and CLI layers can share them
without circular imports.
"""

from __future__ import annotations


class QuickNoteError(Exception):
    """Base class for Quick Note errors."""


class StorageError(QuickNoteError, OSError):
    """Raised when a vault read, write or create fails.

    Always chained to the underlying error so callers can inspect the
    original cause.
    """


class UnreadableDocumentError(StorageError):
    """A document exists but its bytes are not valid UTF-8 text."""


__all__ = ["QuickNoteError", "StorageError", "UnreadableDocumentError"]
