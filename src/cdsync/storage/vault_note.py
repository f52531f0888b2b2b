"""Access to the dictionary note inside a note vault."""
import logging
from pathlib import Path

from cdsync.exceptions import (
    DictionaryNoteNotFoundError,
    ErrorCode,
    StorageError,
)
from cdsync.storage._files import write_text_atomic

logger = logging.getLogger(__name__)


class DictionaryNoteStore:
    """Reads and overwrites the vault's dictionary note.

    Args:
        vault_path: Root path of the note vault.
        note_name: Vault-relative path of the note, e.g. ``Custom Dictionary.md``.
    """

    def __init__(self, vault_path: Path, note_name: str) -> None:
        self.vault_path = Path(vault_path)
        self.note_name = note_name

    @property
    def path(self) -> Path:
        return self.vault_path / self.note_name

    @property
    def display_name(self) -> str:
        """Note name as shown in the vault (no folder, no extension)."""
        return Path(self.note_name).stem

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> str:
        """Return the note content.

        Raises:
            DictionaryNoteNotFoundError: If the note is absent, is not a
                regular file, or cannot be read as UTF-8 text.
        """
        if not self.exists():
            raise DictionaryNoteNotFoundError(self.note_name)
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DictionaryNoteNotFoundError(
                self.note_name,
                message=f"Dictionary note '{self.note_name}' could not be read",
                code=ErrorCode.NOTE_UNREADABLE,
                original_error=e,
            ) from e

    def write(self, text: str) -> Path:
        """Overwrite the note with ``text``.

        Raises:
            StorageError: If the note cannot be written.
        """
        try:
            write_text_atomic(self.path, text)
        except OSError as e:
            raise StorageError(
                f"Failed to write dictionary note '{self.note_name}'",
                operation="write_note",
                path=str(self.path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e
        logger.debug(f"Wrote dictionary note: {self.path}")
        return self.path
