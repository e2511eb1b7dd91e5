"""Pytest fixtures for Quick Note tests."""

import pendulum
import pytest

from quicknote.config import QuickNoteConfig
from quicknote.ledger import LedgerWriter
from quicknote.paths import VaultPaths
from quicknote.service import DailyNoteService
from quicknote.storage import VaultStore


@pytest.fixture
def temp_vault(tmp_path):
    """Create a temporary vault for testing.
    
    Args:
        tmp_path: pytest's built-in temporary directory fixture
        
    Returns:
        Path to temporary vault root
    """
    vault_root = tmp_path / "test_vault"
    vault_root.mkdir()
    return vault_root


@pytest.fixture
def vault_config(temp_vault):
    """QuickNoteConfig pointing to the temporary vault."""
    return QuickNoteConfig(vault_path=temp_vault)


@pytest.fixture
def vault_paths(vault_config):
    """VaultPaths for the temporary vault, with directories and ledger created."""
    paths = VaultPaths.from_config(vault_config)

    for directory in paths.get_all_directories():
        directory.mkdir(parents=True, exist_ok=True)

    paths.ledger_file.touch()

    return paths


@pytest.fixture
def store(temp_vault):
    return VaultStore(temp_vault)


@pytest.fixture
def notices():
    """List collecting notices emitted by the service."""
    return []


@pytest.fixture
def service(store, vault_config, vault_paths, notices):
    return DailyNoteService(
        store=store,
        config=vault_config,
        ledger_writer=LedgerWriter(vault_paths.ledger_file),
        notifier=notices.append,
    )


@pytest.fixture
def fixed_now():
    """Injected clock: 2026-01-11 14:30 UTC."""
    return pendulum.datetime(2026, 1, 11, 14, 30, 0)
