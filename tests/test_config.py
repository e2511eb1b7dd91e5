"""Tests for configuration loading and vault resolution."""

from quicknote.config import QuickNoteConfig, resolve_vault_root
from quicknote.models import InsertionPolicy


def test_defaults():
    config = QuickNoteConfig()
    assert config.date_format == "YYYY-MM-DD"
    assert config.timestamp_format == "HH:mm"
    assert config.insert_at_bottom is True
    assert config.heading_to_insert_after == ""
    assert config.timeline_days == 7
    assert config.insertion_policy == InsertionPolicy.bottom()


def test_policy_resolution_from_settings():
    assert QuickNoteConfig(insert_at_bottom=False).insertion_policy == InsertionPolicy.top_of_file()
    assert QuickNoteConfig(
        insert_at_bottom=False, heading_to_insert_after="## Notes"
    ).insertion_policy == InsertionPolicy.after_heading("## Notes")


def test_cli_vault_path_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("QUICKNOTE_VAULT", str(tmp_path / "env"))
    assert resolve_vault_root(str(tmp_path / "cli")) == (tmp_path / "cli").resolve()


def test_env_vault_path(tmp_path, monkeypatch):
    monkeypatch.setenv("QUICKNOTE_VAULT", str(tmp_path / "env"))
    assert resolve_vault_root() == (tmp_path / "env").resolve()


def test_vault_discovered_from_cwd(tmp_path, monkeypatch):
    monkeypatch.delenv("QUICKNOTE_VAULT", raising=False)
    (tmp_path / ".quicknote").mkdir()
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert resolve_vault_root() == tmp_path.resolve()


def test_from_env_reads_vault_config_file(temp_vault, monkeypatch):
    for name in ("QUICKNOTE_DATE_FORMAT", "QUICKNOTE_TIMESTAMP_FORMAT", "QUICKNOTE_INSERT_AT_BOTTOM", "QUICKNOTE_HEADING"):
        monkeypatch.delenv(name, raising=False)
    (temp_vault / ".quicknote").mkdir()
    (temp_vault / ".quicknote" / "config.toml").write_text(
        'date_format = "YYYY.MM.DD"\ninsert_at_bottom = false\nheading_to_insert_after = "## Log"\ntimeline_days = 3\n'
    )

    config = QuickNoteConfig.from_env(cli_vault_path=str(temp_vault))

    assert config.date_format == "YYYY.MM.DD"
    assert config.timeline_days == 3
    assert config.insertion_policy == InsertionPolicy.after_heading("## Log")


def test_env_overrides_config_file(temp_vault, monkeypatch):
    (temp_vault / ".quicknote").mkdir()
    (temp_vault / ".quicknote" / "config.toml").write_text('timestamp_format = "HH:mm"\ninsert_at_bottom = false\n')
    monkeypatch.setenv("QUICKNOTE_TIMESTAMP_FORMAT", "HH:mm:ss")
    monkeypatch.setenv("QUICKNOTE_INSERT_AT_BOTTOM", "yes")

    config = QuickNoteConfig.from_env(cli_vault_path=str(temp_vault))

    assert config.timestamp_format == "HH:mm:ss"
    assert config.insert_at_bottom is True


def test_malformed_config_file_is_ignored(temp_vault):
    (temp_vault / ".quicknote").mkdir()
    (temp_vault / ".quicknote" / "config.toml").write_text("this is = = not toml")

    config = QuickNoteConfig.from_env(cli_vault_path=str(temp_vault))

    assert config.date_format == "YYYY-MM-DD"


def test_to_toml_str_round_trips(temp_vault):
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    config = QuickNoteConfig(vault_path=temp_vault, insert_at_bottom=False, heading_to_insert_after='## "Quoted"')
    data = tomllib.loads(config.to_toml_str())

    assert data["insert_at_bottom"] is False
    assert data["heading_to_insert_after"] == '## "Quoted"'
    assert data["timeline_days"] == 7
