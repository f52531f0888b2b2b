"""Storage layer for CDSync."""

from cdsync.storage.external_file import (
    DownloadWriter,
    FilePicker,
    PromptFilePicker,
    StaticFilePicker,
    read_external_file,
)
from cdsync.storage.settings_store import SettingsStore
from cdsync.storage.vault_note import DictionaryNoteStore

__all__ = [
    "DictionaryNoteStore",
    "SettingsStore",
    "FilePicker",
    "StaticFilePicker",
    "PromptFilePicker",
    "DownloadWriter",
    "read_external_file",
]
