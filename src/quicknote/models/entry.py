"""Pydantic models for note entries and timelines."""

from typing import Iterator, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Entry(BaseModel):
    """One captured note.

    Written to a daily note as a single canonical line:
    ``- <timestamp> <content> [<attachment marker>]``.
    """

    timestamp: str = Field(description="Time of capture, formatted per timestamp_format")
    content: str = Field(default="", description="Note text (stripped)")
    attachments: list[str] = Field(
        default_factory=list,
        description="Vault-relative attachment paths in attach order",
    )

    model_config = {"frozen": True}

    @field_validator("content")
    @classmethod
    def _strip_content(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _require_content_or_attachments(self) -> "Entry":
        if not self.content and not self.attachments:
            raise ValueError("Entry needs content or at least one attachment")
        return self


InsertionKind = Literal["bottom", "top_of_file", "after_heading"]


class InsertionPolicy(BaseModel):
    """Where a new entry line lands inside a daily note."""

    kind: InsertionKind = Field(default="bottom")
    heading: Optional[str] = Field(default=None, description="Heading text for after_heading")

    model_config = {"frozen": True}

    @classmethod
    def bottom(cls) -> "InsertionPolicy":
        return cls(kind="bottom")

    @classmethod
    def top_of_file(cls) -> "InsertionPolicy":
        return cls(kind="top_of_file")

    @classmethod
    def after_heading(cls, heading: str) -> "InsertionPolicy":
        return cls(kind="after_heading", heading=heading)

    @property
    def newest_last(self) -> bool:
        """True when later entries land below earlier ones in the document."""
        return self.kind == "bottom"


class TimelineDay(BaseModel):
    """Entries of one daily note, in display order."""

    date_key: str
    entries: list[Entry]

    model_config = {"frozen": True}


class TimelineWindow(BaseModel):
    """Entries of the last N days, most recent day first."""

    days: list[TimelineDay] = Field(default_factory=list)
    complete: bool = Field(default=True, description="False if the build was cancelled")

    def entries(self) -> Iterator[tuple[str, Entry]]:
        """Iterate (date_key, entry) pairs in display order."""
        for day in self.days:
            for entry in day.entries:
                yield day.date_key, entry

    def __len__(self) -> int:
        return sum(len(day.entries) for day in self.days)
