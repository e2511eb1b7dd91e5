"""Path management and vault structure for Quick Note."""

from pathlib import Path

from .config import CONFIG_FILE_NAME, SYSTEM_DIR_NAME, QuickNoteConfig


class VaultPaths:
    """Manages paths within a Quick Note vault."""

    def __init__(self, vault_root: Path, daily_note_folder: str = "", attachment_folder: str = "attachments"):
        """Initialize vault paths from root directory.
        
        Args:
            vault_root: Root directory of the vault
            daily_note_folder: Vault-relative folder for new daily notes ("" = root)
            attachment_folder: Vault-relative folder for attachments
        """
        self.root = vault_root

        # Vault-relative folders (as the document store sees them)
        self.daily_note_folder = daily_note_folder.strip("/")
        self.attachment_folder = attachment_folder.strip("/")

        # System directory and files
        self.system = vault_root / SYSTEM_DIR_NAME
        self.config_file = self.system / CONFIG_FILE_NAME
        self.ledger_file = self.system / "ledger.jsonl"

        # Absolute folders
        self.daily = vault_root / self.daily_note_folder if self.daily_note_folder else vault_root
        self.attachments = vault_root / self.attachment_folder

    @classmethod
    def from_config(cls, config: QuickNoteConfig) -> "VaultPaths":
        """Create VaultPaths from a QuickNoteConfig."""
        return cls(config.vault_path, config.daily_note_folder, config.attachment_folder)

    def get_all_directories(self) -> list[Path]:
        """Get list of all directories that should exist in the vault."""
        return [self.root, self.system, self.daily, self.attachments]

    def daily_note_relpath(self, date_key: str) -> str:
        """Vault-relative path for a new daily note.

        Args:
            date_key: Date formatted per the configured date format

        Returns:
            Path such as ``journal/2026-01-11.md``
        """
        name = f"{date_key}.md"
        return f"{self.daily_note_folder}/{name}" if self.daily_note_folder else name

    def daily_note_path(self, date_key: str) -> Path:
        """Absolute path to the daily note for a date key."""
        return self.root / self.daily_note_relpath(date_key)

    def attachment_relpath(self, filename: str) -> str:
        """Vault-relative path for an attachment file name."""
        return f"{self.attachment_folder}/{filename}" if self.attachment_folder else filename
