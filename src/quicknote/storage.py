"""Document storage for Quick Note.

``DocumentStore`` is the contract the service consumes. ``VaultStore``
implements it over a local vault directory; every ``OSError`` is
re-raised as ``StorageError``, and a note that is not UTF-8 as
``UnreadableDocumentError``.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

from .errors import StorageError, UnreadableDocumentError
from .models.vault import Document

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Operations Quick Note needs from the host document storage."""

    def list_all_documents(self) -> list[Document]: ...

    def find_document_by_name(self, name: str) -> Optional[Document]: ...

    def create_document(self, path: str, initial_text: str = "") -> Document: ...

    def read_text(self, document: Document) -> str: ...

    def write_text(self, document: Document, text: str) -> None: ...

    def create_binary(self, path: str, data: bytes) -> Document: ...

    def path_exists(self, path: str) -> Optional[Document]: ...

    def create_folder(self, path: str) -> None: ...

    def resolve_displayable_path(self, document: Document) -> str: ...


def normalize_vault_path(path: str) -> str:
    """Normalize a vault-relative path to forward slashes without leading ./ or /."""
    parts = [p for p in PurePosixPath(path.replace("\\", "/")).parts if p not in ("", ".", "/")]
    if ".." in parts:
        raise StorageError(f"Path escapes the vault: {path}")
    return "/".join(parts)


class VaultStore:
    """Filesystem-backed document store rooted at a vault directory."""

    def __init__(self, root: Path):
        """Initialize the store.

        Args:
            root: Vault root directory
        """
        self.root = root

    def _abs(self, path: str) -> Path:
        relative = normalize_vault_path(path)
        return self.root / relative if relative else self.root

    def _document(self, absolute: Path) -> Document:
        return Document(path=absolute.relative_to(self.root).as_posix())

    def list_all_documents(self) -> list[Document]:
        """All markdown documents in the vault, skipping hidden folders."""
        if not self.root.exists():
            return []
        try:
            found = [
                p
                for p in self.root.rglob("*.md")
                if p.is_file()
                and not any(part.startswith(".") for part in p.relative_to(self.root).parts[:-1])
            ]
        except OSError as e:
            raise StorageError(f"Failed to list vault documents: {e}") from e
        return [self._document(p) for p in sorted(found)]

    def find_document_by_name(self, name: str) -> Optional[Document]:
        """First document whose stem, or vault path without suffix, equals ``name``."""
        wanted = normalize_vault_path(name)
        for document in self.list_all_documents():
            without_suffix = str(PurePosixPath(document.path).with_suffix(""))
            if document.name == wanted or without_suffix == wanted:
                return document
        return None

    def create_document(self, path: str, initial_text: str = "") -> Document:
        target = self._abs(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "x", encoding="utf-8") as f:
                f.write(initial_text)
        except OSError as e:
            raise StorageError(f"Failed to create document {path}: {e}") from e
        logger.debug("Created document %s", target)
        return self._document(target)

    def read_text(self, document: Document) -> str:
        try:
            return self._abs(document.path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise UnreadableDocumentError(f"{document.path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {document.path}: {e}") from e

    def write_text(self, document: Document, text: str) -> None:
        try:
            self._abs(document.path).write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {document.path}: {e}") from e

    def create_binary(self, path: str, data: bytes) -> Document:
        """Write a new binary file. Never overwrites an existing one."""
        target = self._abs(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to create {path}: {e}") from e
        return self._document(target)

    def path_exists(self, path: str) -> Optional[Document]:
        target = self._abs(path)
        if target.exists():
            return self._document(target)
        return None

    def create_folder(self, path: str) -> None:
        """Create a folder; an existing folder counts as success."""
        try:
            self._abs(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create folder {path}: {e}") from e

    def resolve_displayable_path(self, document: Document) -> str:
        return self._abs(document.path).resolve().as_uri()
