"""Pydantic models for vault documents and operation results."""

from pathlib import PurePosixPath
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .entry import Entry


class Document(BaseModel):
    """Handle to a file inside the vault.

    ``path`` is vault-relative and always uses forward slashes.
    """

    path: str

    model_config = {"frozen": True}

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def name(self) -> str:
        """File name without extension (the daily note lookup key)."""
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()


class Notice(BaseModel):
    """Transient user-visible message about an operation outcome."""

    level: Literal["success", "failure", "info"]
    message: str

    model_config = {"frozen": True}


class AttachmentResult(BaseModel):
    """Outcome of saving one attachment into the vault."""

    path: str = Field(description="Vault-relative path to reference from the entry")
    reused: bool = Field(default=False, description="True if an existing file was kept")
    is_image: bool = Field(default=False)
    display_uri: Optional[str] = Field(default=None, description="Preview URI for images")

    model_config = {"frozen": True}


class NoteResult(BaseModel):
    """Outcome of appending one entry to a daily note."""

    date_key: str
    document: Document
    entry: Entry
    created_document: bool = False

    model_config = {"frozen": True}
