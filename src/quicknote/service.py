"""Daily note service: capture notes and attachments, read them back.

Each ``add_note`` call is a read-modify-write of one daily note with no
lock held between the read and the write. Two concurrent appends to the
same note can lose one of the updates; single-user usage makes this an
accepted hazard.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

import pendulum

from .config import QuickNoteConfig
from .errors import StorageError, UnreadableDocumentError
from .formats import DateLike, format_moment, to_pendulum
from .ledger import LedgerWriter
from .models.entry import Entry, TimelineWindow
from .models.ledger import LedgerEventType
from .models.vault import AttachmentResult, Document, NoteResult, Notice
from .parser import parse_entries
from .paths import VaultPaths
from .storage import DocumentStore
from .timeline import build_timeline, entry_display_time
from .writer import append_entry

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "svg"}

Notifier = Callable[[Notice], None]


def log_notifier(notice: Notice) -> None:
    """Default notifier: route notices to the log."""
    if notice.level == "failure":
        logger.warning(notice.message)
    else:
        logger.info(notice.message)


class DailyNoteService:
    """Adds entries to daily notes and reads them back as a timeline."""

    def __init__(
        self,
        store: DocumentStore,
        config: QuickNoteConfig,
        ledger_writer: Optional[LedgerWriter] = None,
        notifier: Optional[Notifier] = None,
    ):
        """Initialize the service.

        Args:
            store: Document storage for the vault
            config: Settings (formats, insertion policy, folders)
            ledger_writer: Optional ledger for audit events
            notifier: Receives success/failure notices (default: log)
        """
        self.store = store
        self.config = config
        self.paths = VaultPaths.from_config(config)
        self.ledger_writer = ledger_writer
        self.notifier = notifier or log_notifier

    def _notify(self, level: str, message: str) -> None:
        self.notifier(Notice(level=level, message=message))

    def _record(self, event_type: LedgerEventType, payload: dict, date_key: str | None = None) -> None:
        if self.ledger_writer is not None:
            self.ledger_writer.append_event(event_type=event_type, payload=payload, date_key=date_key)

    @staticmethod
    def _now(now: DateLike | None) -> pendulum.DateTime:
        return pendulum.now() if now is None else to_pendulum(now)

    def find_daily_note(self, date_key: str) -> Optional[Document]:
        """Daily note for ``date_key``: its configured location first, then by name."""
        document = self.store.path_exists(self.paths.daily_note_relpath(date_key))
        if document is not None:
            return document
        return self.store.find_document_by_name(date_key)

    def get_or_create_daily_note(self, date_key: str) -> tuple[Document, bool]:
        """Find the daily note for ``date_key`` or create it empty.

        Returns:
            Tuple of (document, created)
        """
        document = self.find_daily_note(date_key)
        if document is not None:
            return document, False

        document = self.store.create_document(self.paths.daily_note_relpath(date_key), "")
        logger.info("Created daily note %s", document.path)
        self._record("DAILY_NOTE_CREATED", {"path": document.path}, date_key)
        return document, True

    def add_note(
        self,
        content: str,
        attachments: Sequence[str] = (),
        now: DateLike | None = None,
    ) -> NoteResult:
        """Append a timestamped entry to today's daily note.

        Args:
            content: Note text
            attachments: Vault-relative paths of already saved attachments
            now: Capture time (default: current time)

        Returns:
            NoteResult describing the written entry

        Raises:
            ValueError: If content is blank and there are no attachments
            StorageError: If the daily note cannot be read, created or written
        """
        if not content.strip() and not attachments:
            raise ValueError("Nothing to note: content is empty and there are no attachments")

        moment = self._now(now)
        date_key = format_moment(moment, self.config.date_format)
        entry = Entry(
            timestamp=format_moment(moment, self.config.timestamp_format),
            content=content,
            attachments=list(attachments),
        )

        try:
            document, created = self.get_or_create_daily_note(date_key)
            existing_body = self.store.read_text(document)
            new_body = append_entry(existing_body, entry, self.config.insertion_policy)
            self.store.write_text(document, new_body)
        except StorageError as e:
            logger.error("Failed to add note to %s: %s", date_key, e)
            self._notify("failure", f"Failed to add note: {e}")
            self._record("NOTE_APPEND_FAILED", {"error": str(e)}, date_key)
            raise

        self._notify("success", "Note added")
        self._record(
            "NOTE_APPENDED",
            {
                "path": document.path,
                "timestamp": entry.timestamp,
                "policy": self.config.insertion_policy.kind,
                "attachments": list(entry.attachments),
            },
            date_key,
        )
        return NoteResult(date_key=date_key, document=document, entry=entry, created_document=created)

    def save_attachment(self, filename: str, data: bytes) -> AttachmentResult:
        """Store an attachment in the attachment folder.

        An existing file with the same name is reused, never overwritten.

        Args:
            filename: File name (directories are dropped)
            data: File contents

        Returns:
            AttachmentResult with the vault-relative path to reference

        Raises:
            ValueError: If the file name is empty
            StorageError: If the folder or file cannot be created
        """
        name = Path(filename).name
        if not name:
            raise ValueError("Attachment file name is empty")
        relpath = self.paths.attachment_relpath(name)

        try:
            folder = self.paths.attachment_folder
            if folder and self.store.path_exists(folder) is None:
                self.store.create_folder(folder)

            document = self.store.path_exists(relpath)
            reused = document is not None
            if document is None:
                try:
                    document = self.store.create_binary(relpath, data)
                except StorageError:
                    # Lost a race with another writer for the same name
                    document = self.store.path_exists(relpath)
                    if document is None:
                        raise
                    reused = True
        except StorageError as e:
            logger.error("Failed to save attachment %s: %s", name, e)
            self._notify("failure", f"Failed to save attachment {name}: {e}")
            self._record("ATTACHMENT_FAILED", {"filename": name, "error": str(e)})
            raise

        if reused:
            self._notify("info", f"Attachment {document.path} already exists; reusing it")
            self._record("ATTACHMENT_REUSED", {"path": document.path})
        else:
            self._notify("success", f"Attachment saved: {document.path}")
            self._record("ATTACHMENT_SAVED", {"path": document.path, "bytes": len(data)})

        is_image = document.extension in IMAGE_EXTENSIONS
        return AttachmentResult(
            path=document.path,
            reused=reused,
            is_image=is_image,
            display_uri=self.store.resolve_displayable_path(document) if is_image else None,
        )

    def attach_file(self, source_path: Path) -> AttachmentResult:
        """Copy a local file into the attachment folder.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        if not source_path.is_file():
            raise FileNotFoundError(f"Attachment source not found: {source_path}")
        return self.save_attachment(source_path.name, source_path.read_bytes())

    def capture(
        self,
        content: str,
        attachment_files: Sequence[Path] = (),
        now: DateLike | None = None,
    ) -> NoteResult:
        """Save attachments, then append one entry referencing them.

        Attachments saved before a failed append are left in place.
        """
        paths = [self.attach_file(source).path for source in attachment_files]
        return self.add_note(content, paths, now=now)

    def fetch_document(self, date_key: str) -> str | None:
        """Body of the daily note for ``date_key``, or None. Never creates."""
        document = self.find_daily_note(date_key)
        if document is None:
            return None
        return self.store.read_text(document)

    def _fetch_for_timeline(self, date_key: str) -> str | None:
        try:
            return self.fetch_document(date_key)
        except UnreadableDocumentError as e:
            logger.warning("Skipping daily note %s in timeline: %s", date_key, e)
            return None

    def entries_for(self, date_key: str) -> list[Entry]:
        """Entries of one daily note in document order."""
        body = self.fetch_document(date_key)
        if not body:
            return []
        return parse_entries(body, self.config.timestamp_format)

    def timeline(
        self,
        now: DateLike | None = None,
        day_count: int | None = None,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> TimelineWindow:
        """Entries of the last ``day_count`` days (default from config).

        A daily note that is not valid UTF-8 is skipped with a warning;
        other storage failures propagate.
        """
        return build_timeline(
            today=self._now(now),
            day_count=day_count if day_count is not None else self.config.timeline_days,
            date_format=self.config.date_format,
            fetch_document=self._fetch_for_timeline,
            timestamp_format=self.config.timestamp_format,
            policy=self.config.insertion_policy,
            is_cancelled=is_cancelled,
        )

    def display_time(self, date_key: str, entry: Entry, now: DateLike | None = None) -> str:
        """Relative time for an entry, or its literal date and time."""
        return entry_display_time(
            date_key,
            entry,
            self.config.date_format,
            self.config.timestamp_format,
            self._now(now),
        )
