"""Service layer for the dictionary sync operation.

The stored "to lower case" setting is loaded and persisted but does not
change what a sync writes. Folding only happens when the service is built
with ``apply_lower_case=True`` (``CDSYNC_APPLY_LOWER_CASE`` or
``cdsync sync --apply-lower-case``) and the setting is on. Whether the
setting should drive the merge by default is still open.
"""

import logging
import threading
from typing import Callable, Optional

from cdsync.config import CDSyncConfig, config as default_config
from cdsync.dictionary import (
    merge_entries,
    parse_external_entries,
    parse_note_entries,
    serialize_entries,
)
from cdsync.exceptions import (
    ConfigurationError,
    DictionaryNoteNotFoundError,
    ExternalFileReadError,
    StorageError,
    SyncInProgressError,
)
from cdsync.models.schema import PluginSettings, SyncOutcome, SyncResult
from cdsync.observability import timed_operation
from cdsync.storage.external_file import (
    DownloadWriter,
    FilePicker,
    read_external_file,
)
from cdsync.storage.settings_store import SettingsStore
from cdsync.storage.vault_note import DictionaryNoteStore

logger = logging.getLogger(__name__)

# Metrics key under which every sync run is timed
SYNC_OPERATION = "sync_dictionary"

Notifier = Callable[[str], None]


class DictionarySyncService:
    """Merges the dictionary note with an external word list.

    A sync reads the note, asks the picker for the external list, reads it,
    and writes the merged list back to the note and to the download
    location. Only one sync runs at a time; a second trigger while one is in
    flight is refused.

    Args:
        note_store: Access to the vault's dictionary note (source A).
        settings_store: Persistence for plugin settings.
        download_writer: Delivers the merged list (replacement for source B).
        notifier: Shows transient messages to the user.
        apply_lower_case: Honour the stored lower-case setting while merging.
    """

    def __init__(
        self,
        note_store: DictionaryNoteStore,
        settings_store: SettingsStore,
        download_writer: DownloadWriter,
        notifier: Optional[Notifier] = None,
        apply_lower_case: bool = False,
    ) -> None:
        self.note_store = note_store
        self.settings_store = settings_store
        self.download_writer = download_writer
        self._notifier = notifier
        self.apply_lower_case = apply_lower_case
        self._sync_lock = threading.Lock()
        self.settings = settings_store.load()

    @classmethod
    def from_config(
        cls,
        cfg: Optional[CDSyncConfig] = None,
        notifier: Optional[Notifier] = None,
    ) -> "DictionarySyncService":
        """Build a service wired to the configured vault and download directory."""
        cfg = cfg or default_config
        return cls(
            note_store=DictionaryNoteStore(cfg.get_vault_path(), cfg.dictionary_note),
            settings_store=SettingsStore(cfg.get_settings_path()),
            download_writer=DownloadWriter(cfg.get_download_dir(), cfg.download_filename),
            notifier=notifier,
            apply_lower_case=cfg.apply_lower_case,
        )

    @property
    def fold_case(self) -> bool:
        """Whether the next sync folds first-letter-capped words."""
        return self.apply_lower_case and self.settings.to_lower_case

    @property
    def is_syncing(self) -> bool:
        return self._sync_lock.locked()

    def update_settings(self, **changes) -> PluginSettings:
        """Apply setting changes and persist them immediately."""
        unknown = set(changes) - set(PluginSettings.model_fields)
        if unknown:
            raise ConfigurationError(
                f"Unknown setting: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0],
            )
        updated = PluginSettings.model_validate({**self.settings.model_dump(), **changes})
        self.settings_store.save(updated)
        self.settings = updated
        logger.info(f"Settings updated: {updated.model_dump()}")
        return updated

    def _notify(self, result: SyncResult, message: str) -> None:
        result.notices.append(message)
        if self._notifier is not None:
            self._notifier(message)

    def sync(self, picker: FilePicker) -> SyncResult:
        """Run one sync.

        Returns:
            A SyncResult whose outcome is COMPLETED, CANCELLED (no file was
            picked) or NOTE_MISSING (the dictionary note could not be read).

        Raises:
            SyncInProgressError: If another sync is still running.
            ExternalFileReadError: If the picked file cannot be read.
            StorageError: If writing the note or delivering the download fails.
        """
        if not self._sync_lock.acquire(blocking=False):
            raise SyncInProgressError()
        try:
            with timed_operation(
                SYNC_OPERATION, note=self.note_store.note_name
            ) as op:
                result = self._sync(picker)
                op["outcome"] = result.outcome.value
                op["merged_entries"] = result.merged_entries
                return result
        finally:
            self._sync_lock.release()

    def _sync(self, picker: FilePicker) -> SyncResult:
        try:
            note_text = self.note_store.read()
        except DictionaryNoteNotFoundError as e:
            logger.warning(str(e))
            result = SyncResult(outcome=SyncOutcome.NOTE_MISSING)
            self._notify(
                result, f'Failed to read note "{self.note_store.display_name}"'
            )
            return result

        picked = picker.pick()
        if picked.cancelled:
            logger.debug("No word list selected, sync cancelled")
            return SyncResult(outcome=SyncOutcome.CANCELLED)

        try:
            external_text = read_external_file(picked.path)
        except ExternalFileReadError as e:
            logger.error(f"Sync aborted, nothing written: {e}")
            raise

        note_entries = parse_note_entries(note_text)
        external_entries = parse_external_entries(external_text)
        merged = merge_entries(note_text, external_text, lower_case=self.fold_case)
        merged_text = serialize_entries(merged)

        note_path = self.note_store.write(merged_text)
        try:
            download_path = self.download_writer.deliver(merged_text)
        except StorageError:
            logger.error(
                f"Dictionary note {note_path} was already updated; "
                "the merged word list was not delivered"
            )
            raise

        merged_set = set(merged)
        result = SyncResult(
            outcome=SyncOutcome.COMPLETED,
            note_entries=len(note_entries),
            external_entries=len(external_entries),
            merged_entries=len(merged),
            added_to_note=len(merged_set - set(note_entries)),
            added_to_external=len(merged_set - set(external_entries)),
            note_path=note_path,
            download_path=download_path,
        )
        logger.info(
            f"Synced {result.merged_entries} entries "
            f"(+{result.added_to_note} note, +{result.added_to_external} word list)"
        )
        return result
