"""Tests for the daily note service."""

import json

import pendulum
import pytest

from quicknote.config import QuickNoteConfig
from quicknote.errors import StorageError, UnreadableDocumentError
from quicknote.models import Entry
from quicknote.service import DailyNoteService
from quicknote.storage import VaultStore


def _ledger_types(vault_paths):
    lines = vault_paths.ledger_file.read_text().strip().split("\n")
    return [json.loads(line)["event_type"] for line in lines if line]


def test_add_note_creates_daily_note_lazily(service, temp_vault, fixed_now, notices, vault_paths):
    assert not (temp_vault / "2026-01-11.md").exists()

    result = service.add_note("first thought", now=fixed_now)

    assert result.created_document
    assert result.date_key == "2026-01-11"
    assert result.entry == Entry(timestamp="14:30", content="first thought")
    assert (temp_vault / "2026-01-11.md").read_text() == "- 14:30 first thought\n"
    assert [n.level for n in notices] == ["success"]
    assert _ledger_types(vault_paths) == ["DAILY_NOTE_CREATED", "NOTE_APPENDED"]


def test_add_note_appends_to_existing_note(service, temp_vault, fixed_now):
    (temp_vault / "2026-01-11.md").write_text("# Sunday\n- 09:00 earlier")

    result = service.add_note("later", now=fixed_now)

    assert not result.created_document
    assert (temp_vault / "2026-01-11.md").read_text() == "# Sunday\n- 09:00 earlier\n- 14:30 later\n"


def test_add_note_finds_note_in_subfolder(service, temp_vault, fixed_now):
    (temp_vault / "journal").mkdir()
    (temp_vault / "journal" / "2026-01-11.md").write_text("")

    result = service.add_note("x", now=fixed_now)

    assert result.document.path == "journal/2026-01-11.md"
    assert not (temp_vault / "2026-01-11.md").exists()


def test_add_note_rejects_blank_draft(service, temp_vault, fixed_now):
    with pytest.raises(ValueError):
        service.add_note("   \n", now=fixed_now)
    assert not (temp_vault / "2026-01-11.md").exists()


def test_add_note_after_heading(temp_vault, fixed_now):
    config = QuickNoteConfig(vault_path=temp_vault, insert_at_bottom=False, heading_to_insert_after="## Log")
    service = DailyNoteService(VaultStore(temp_vault), config)
    (temp_vault / "2026-01-11.md").write_text("# Day\n## Log\n- 09:00 a\n## End\n")

    service.add_note("b", now=fixed_now)

    assert (temp_vault / "2026-01-11.md").read_text() == "# Day\n## Log\n- 14:30 b\n- 09:00 a\n## End\n"


def test_add_note_top_of_file_when_heading_empty(temp_vault, fixed_now):
    config = QuickNoteConfig(vault_path=temp_vault, insert_at_bottom=False, heading_to_insert_after="")
    service = DailyNoteService(VaultStore(temp_vault), config)
    (temp_vault / "2026-01-11.md").write_text("# Day\n")

    service.add_note("top", now=fixed_now)

    assert (temp_vault / "2026-01-11.md").read_text() == "- 14:30 top\n# Day\n"


def test_add_note_uses_configured_formats(temp_vault):
    config = QuickNoteConfig(
        vault_path=temp_vault,
        date_format="DD-MM-YYYY",
        timestamp_format="HH:mm:ss",
        daily_note_folder="daily",
    )
    service = DailyNoteService(VaultStore(temp_vault), config)

    result = service.add_note("x", now=pendulum.datetime(2026, 1, 11, 8, 5, 9))

    assert result.document.path == "daily/11-01-2026.md"
    assert service.entries_for("11-01-2026") == [Entry(timestamp="08:05:09", content="x")]


def test_storage_failure_is_reported_and_reraised(temp_vault, fixed_now, notices, vault_paths):
    class FailingStore(VaultStore):
        def write_text(self, document, text):
            raise StorageError("disk full")

    service = DailyNoteService(
        FailingStore(temp_vault),
        QuickNoteConfig(vault_path=temp_vault),
        notifier=notices.append,
    )

    with pytest.raises(StorageError):
        service.add_note("lost", now=fixed_now)

    assert notices[-1].level == "failure"
    assert "disk full" in notices[-1].message


def test_save_attachment_creates_folder_and_file(service, temp_vault, notices):
    result = service.save_attachment("photo.png", b"\x89PNG")

    assert result.path == "attachments/photo.png"
    assert not result.reused
    assert result.is_image
    assert result.display_uri.startswith("file://")
    assert (temp_vault / "attachments" / "photo.png").read_bytes() == b"\x89PNG"
    assert notices[-1].level == "success"


def test_save_attachment_reuses_existing_file(service, temp_vault, notices, vault_paths):
    (temp_vault / "attachments").mkdir(exist_ok=True)
    (temp_vault / "attachments" / "doc.pdf").write_bytes(b"original")

    result = service.save_attachment("doc.pdf", b"replacement")

    assert result.reused
    assert not result.is_image
    assert result.display_uri is None
    assert (temp_vault / "attachments" / "doc.pdf").read_bytes() == b"original"
    assert notices[-1].level == "info"
    assert _ledger_types(vault_paths)[-1] == "ATTACHMENT_REUSED"


def test_save_attachment_tolerates_existing_folder(service, temp_vault):
    (temp_vault / "attachments").mkdir(exist_ok=True)
    assert service.save_attachment("a.txt", b"a").path == "attachments/a.txt"


def test_save_attachment_strips_directories(service):
    assert service.save_attachment("../../etc/passwd", b"x").path == "attachments/passwd"


def test_attach_file_missing_source(service, tmp_path):
    with pytest.raises(FileNotFoundError):
        service.attach_file(tmp_path / "missing.png")


def test_capture_with_attachments_round_trips(service, tmp_path, fixed_now):
    photo = tmp_path / "beach.jpg"
    photo.write_bytes(b"jpeg")
    scan = tmp_path / "receipt.pdf"
    scan.write_bytes(b"pdf")

    result = service.capture("holiday", [photo, scan], now=fixed_now)

    assert result.entry.attachments == ["attachments/beach.jpg", "attachments/receipt.pdf"]
    assert service.entries_for("2026-01-11") == [result.entry]


def test_capture_failure_leaves_attachment_on_disk(temp_vault, tmp_path, fixed_now):
    class FailingStore(VaultStore):
        def write_text(self, document, text):
            raise StorageError("read-only")

    service = DailyNoteService(FailingStore(temp_vault), QuickNoteConfig(vault_path=temp_vault))
    photo = tmp_path / "a.png"
    photo.write_bytes(b"png")

    with pytest.raises(StorageError):
        service.capture("x", [photo], now=fixed_now)

    assert (temp_vault / "attachments" / "a.png").exists()


def test_fetch_document_never_creates(service, temp_vault):
    assert service.fetch_document("2026-01-11") is None
    assert service.entries_for("2026-01-11") == []
    assert list(temp_vault.glob("*.md")) == []


def test_timeline_across_days(service, fixed_now):
    service.add_note("monday a", now=pendulum.datetime(2026, 1, 9, 9, 0))
    service.add_note("monday b", now=pendulum.datetime(2026, 1, 9, 18, 0))
    service.add_note("today", now=fixed_now)

    window = service.timeline(now=fixed_now, day_count=3)

    assert [d.date_key for d in window.days] == ["2026-01-11", "2026-01-09"]
    assert [e.content for _, e in window.entries()] == ["today", "monday b", "monday a"]


def test_timeline_respects_window(service, fixed_now):
    service.add_note("too old", now=pendulum.datetime(2026, 1, 1, 9, 0))
    assert service.timeline(now=fixed_now).days == []


def test_display_time(service, fixed_now):
    entry = Entry(timestamp="11:30", content="x")
    assert "ago" in service.display_time("2026-01-11", entry, now=fixed_now)
    assert service.display_time("bogus", entry, now=fixed_now) == "bogus 11:30"


def test_repeat_appends_with_nested_date_key_in_daily_folder(temp_vault, fixed_now):
    config = QuickNoteConfig(vault_path=temp_vault, date_format="YYYY/MM/DD", daily_note_folder="daily")
    service = DailyNoteService(VaultStore(temp_vault), config)

    first = service.add_note("one", now=fixed_now)
    second = service.add_note("two", now=fixed_now.add(minutes=5))

    assert first.created_document
    assert not second.created_document
    assert second.document.path == "daily/2026/01/11.md"
    assert (temp_vault / "daily" / "2026" / "01" / "11.md").read_text() == "- 14:30 one\n- 14:35 two\n"
    assert [e.content for e in service.entries_for("2026/01/11")] == ["one", "two"]


def test_timeline_skips_note_that_is_not_utf8(service, temp_vault, fixed_now, caplog):
    (temp_vault / "2026-01-10.md").write_bytes(b"- 09:00 caf\xe9\n")
    service.add_note("today", now=fixed_now)

    window = service.timeline(now=fixed_now, day_count=3)

    assert [d.date_key for d in window.days] == ["2026-01-11"]
    assert window.complete
    assert "2026-01-10" in caplog.text


def test_add_note_to_note_that_is_not_utf8_reports_failure(service, temp_vault, fixed_now, notices, vault_paths):
    (temp_vault / "2026-01-11.md").write_bytes(b"- 09:00 caf\xe9\n")

    with pytest.raises(UnreadableDocumentError):
        service.add_note("x", now=fixed_now)

    assert notices[-1].level == "failure"
    assert _ledger_types(vault_paths)[-1] == "NOTE_APPEND_FAILED"
    assert (temp_vault / "2026-01-11.md").read_bytes() == b"- 09:00 caf\xe9\n"


def test_timeline_with_zero_days_is_empty(service, fixed_now):
    service.add_note("today", now=fixed_now)
    window = service.timeline(now=fixed_now, day_count=0)
    assert window.days == []
    assert window.complete
