"""Common test fixtures for CDSync."""

from pathlib import Path

import pytest

from cdsync.config import config
from cdsync.observability import metrics
from cdsync.services.sync_service import DictionarySyncService
from cdsync.storage.external_file import DownloadWriter
from cdsync.storage.settings_store import SettingsStore
from cdsync.storage.vault_note import DictionaryNoteStore

NOTE_NAME = "Custom Dictionary.md"
DOWNLOAD_NAME = "Custom Dictionary.txt"


@pytest.fixture
def vault_dir(tmp_path):
    """An empty note vault."""
    vault = tmp_path / "vault"
    vault.mkdir()
    return vault


@pytest.fixture
def download_dir(tmp_path):
    """Directory receiving delivered word lists (created on demand)."""
    return tmp_path / "downloads"


@pytest.fixture
def settings_path(vault_dir):
    return vault_dir / ".obsidian" / "plugins" / "cd-sync" / "data.json"


@pytest.fixture
def test_config(vault_dir, download_dir, tmp_path, monkeypatch):
    """Point the global config at temporary paths (auto-restored)."""
    monkeypatch.setattr(config, "base_dir", tmp_path)
    monkeypatch.setattr(config, "vault_path", vault_dir)
    monkeypatch.setattr(config, "download_dir", download_dir)
    monkeypatch.setattr(config, "dictionary_note", NOTE_NAME)
    monkeypatch.setattr(config, "download_filename", DOWNLOAD_NAME)
    monkeypatch.setattr(config, "settings_path", None)
    monkeypatch.setattr(config, "apply_lower_case", False)
    monkeypatch.setattr(config, "log_dir", tmp_path / "logs")
    yield config


@pytest.fixture
def note_store(vault_dir):
    return DictionaryNoteStore(vault_dir, NOTE_NAME)


@pytest.fixture
def settings_store(settings_path):
    return SettingsStore(settings_path)


@pytest.fixture
def download_writer(download_dir):
    return DownloadWriter(download_dir, DOWNLOAD_NAME)


@pytest.fixture
def notices():
    """Collects notices shown to the user."""
    return []


@pytest.fixture
def sync_service(note_store, settings_store, download_writer, notices):
    """A sync service on default settings."""
    service = DictionarySyncService(
        note_store=note_store,
        settings_store=settings_store,
        download_writer=download_writer,
        notifier=notices.append,
    )
    return service


@pytest.fixture
def write_word_list(tmp_path):
    """Create an external word list and return its path."""

    def _write(text: str, name: str = "words.txt") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()
