"""Configuration management for Quick Note."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .formats import DEFAULT_DATE_FORMAT, DEFAULT_TIMESTAMP_FORMAT
from .models.entry import InsertionPolicy
from .timeline import DEFAULT_TIMELINE_DAYS
from .writer import resolve_insertion_policy

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11

SYSTEM_DIR_NAME = ".quicknote"
CONFIG_FILE_NAME = "config.toml"


def _has_vault_markers(path: Path) -> bool:
    """Check if path looks like a Quick Note vault."""
    return (path / SYSTEM_DIR_NAME).is_dir()


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _load_vault_config_data(vault_root: Path) -> Optional[dict]:
    """Load settings from <vault>/.quicknote/config.toml if it exists."""
    config_file = vault_root / SYSTEM_DIR_NAME / CONFIG_FILE_NAME

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def resolve_vault_root(cli_vault_path: Optional[str] = None) -> Path:
    """Resolve vault root path with the following precedence:

    1. CLI --vault option (if provided)
    2. QUICKNOTE_VAULT environment variable
    3. Auto-discovery by walking up from cwd looking for a .quicknote folder
    4. ./quicknote_vault

    Args:
        cli_vault_path: Vault path from CLI --vault option

    Returns:
        Absolute path to vault root directory
    """
    if cli_vault_path:
        return Path(cli_vault_path).resolve()

    env_vault = os.environ.get("QUICKNOTE_VAULT")
    if env_vault:
        return Path(env_vault).resolve()

    current_dir = Path.cwd()
    while True:
        if _has_vault_markers(current_dir):
            return current_dir

        parent_dir = current_dir.parent
        if parent_dir == current_dir:
            break
        current_dir = parent_dir

    return (Path.cwd() / "quicknote_vault").resolve()


class QuickNoteConfig(BaseModel):
    """Settings for capturing notes and building the timeline."""

    vault_path: Path = Field(default_factory=lambda: Path("./quicknote_vault"))
    date_format: str = Field(default=DEFAULT_DATE_FORMAT, description="Daily note name format")
    timestamp_format: str = Field(default=DEFAULT_TIMESTAMP_FORMAT, description="Entry timestamp format")
    insert_at_bottom: bool = Field(default=True)
    heading_to_insert_after: str = Field(
        default="",
        description="Heading to insert after when insert_at_bottom is off; empty means top of file",
    )
    daily_note_folder: str = Field(default="", description="Vault folder for new daily notes")
    attachment_folder: str = Field(default="attachments")
    timeline_days: int = Field(default=DEFAULT_TIMELINE_DAYS, ge=1)

    model_config = {"frozen": False}

    @property
    def insertion_policy(self) -> InsertionPolicy:
        return resolve_insertion_policy(self.insert_at_bottom, self.heading_to_insert_after)

    @classmethod
    def from_env(cls, cli_vault_path: Optional[str] = None) -> "QuickNoteConfig":
        """Load configuration from the vault config file and environment.

        Environment variables override values from .quicknote/config.toml.

        Args:
            cli_vault_path: Vault path from CLI --vault option (highest precedence)
        """
        vault_path = resolve_vault_root(cli_vault_path)
        data = _load_vault_config_data(vault_path) or {}
        defaults = cls(vault_path=vault_path)

        return cls(
            vault_path=vault_path,
            date_format=os.environ.get("QUICKNOTE_DATE_FORMAT", data.get("date_format", defaults.date_format)),
            timestamp_format=os.environ.get(
                "QUICKNOTE_TIMESTAMP_FORMAT",
                data.get("timestamp_format", defaults.timestamp_format),
            ),
            insert_at_bottom=_env_bool(
                "QUICKNOTE_INSERT_AT_BOTTOM",
                bool(data.get("insert_at_bottom", defaults.insert_at_bottom)),
            ),
            heading_to_insert_after=os.environ.get(
                "QUICKNOTE_HEADING",
                data.get("heading_to_insert_after", defaults.heading_to_insert_after),
            ),
            daily_note_folder=os.environ.get(
                "QUICKNOTE_DAILY_NOTE_FOLDER",
                data.get("daily_note_folder", defaults.daily_note_folder),
            ),
            attachment_folder=os.environ.get(
                "QUICKNOTE_ATTACHMENT_FOLDER",
                data.get("attachment_folder", defaults.attachment_folder),
            ),
            timeline_days=int(os.environ.get("QUICKNOTE_TIMELINE_DAYS", data.get("timeline_days", defaults.timeline_days))),
        )

    def to_toml_str(self) -> str:
        """Generate TOML configuration string."""
        heading = self.heading_to_insert_after.replace("\\", "\\\\").replace('"', '\\"')
        return f"""# Quick Note Configuration

# Daily note file name and entry timestamp (moment-style tokens)
date_format = "{self.date_format}"
timestamp_format = "{self.timestamp_format}"

# Insertion: bottom of the note, or after a heading (empty heading = top of file)
insert_at_bottom = {str(self.insert_at_bottom).lower()}
heading_to_insert_after = "{heading}"

# Vault folders
daily_note_folder = "{self.daily_note_folder}"
attachment_folder = "{self.attachment_folder}"

# Timeline
timeline_days = {self.timeline_days}
"""
