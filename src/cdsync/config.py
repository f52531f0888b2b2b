"""Configuration module for CDSync."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from cdsync import __version__

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config: survives reinstalls
_USER_ENV = Path.home() / ".cdsync" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY_NOTE = "Custom Dictionary.md"
DEFAULT_DOWNLOAD_FILENAME = "Custom Dictionary.txt"
DEFAULT_PLUGIN_ID = "cd-sync"


def _optional_path(env_var: str) -> Optional[Path]:
    value = os.getenv(env_var)
    return Path(value).expanduser() if value else None


class CDSyncConfig(BaseModel):
    """Configuration for CDSync."""

    # Base directory that relative paths are resolved against
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("CDSYNC_BASE_DIR", "."))
    )
    # Root of the note vault holding the dictionary note
    vault_path: Path = Field(
        default_factory=lambda: Path(os.getenv("CDSYNC_VAULT_PATH", "."))
    )
    # Vault-relative path of the dictionary note (source A)
    dictionary_note: str = Field(
        default_factory=lambda: os.getenv(
            "CDSYNC_DICTIONARY_NOTE", DEFAULT_DICTIONARY_NOTE
        )
    )
    # Where the merged word list is delivered (source B replacement)
    download_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("CDSYNC_DOWNLOAD_DIR", str(Path.home() / "Downloads"))
        ).expanduser()
    )
    download_filename: str = Field(
        default_factory=lambda: os.getenv(
            "CDSYNC_DOWNLOAD_FILENAME", DEFAULT_DOWNLOAD_FILENAME
        )
    )
    # Plugin identifier, names the settings data directory inside the vault
    plugin_id: str = Field(
        default_factory=lambda: os.getenv("CDSYNC_PLUGIN_ID", DEFAULT_PLUGIN_ID)
    )
    # Explicit settings file; defaults to <vault>/.obsidian/plugins/<plugin_id>/data.json
    settings_path: Optional[Path] = Field(
        default_factory=lambda: _optional_path("CDSYNC_SETTINGS_PATH")
    )
    # Let the stored lower-case setting fold words during a sync (off: merge keeps case)
    apply_lower_case: bool = Field(
        default_factory=lambda: os.getenv("CDSYNC_APPLY_LOWER_CASE", "false").lower()
        in ("true", "1", "yes")
    )
    log_dir: Optional[Path] = Field(
        default_factory=lambda: _optional_path("CDSYNC_LOG_DIR")
    )
    # Server configuration
    server_name: str = Field(default=os.getenv("CDSYNC_SERVER_NAME", "cdsync"))
    server_version: str = Field(default=__version__)

    @model_validator(mode="after")
    def _validate_file_names(self) -> "CDSyncConfig":
        """Reject note and download names that cannot be used as-is."""
        if not self.dictionary_note.strip():
            raise ValueError("dictionary_note must not be empty")
        if not self.dictionary_note.endswith(".md"):
            raise ValueError("dictionary_note must be a markdown (.md) note")
        if not self.download_filename.strip():
            raise ValueError("download_filename must not be empty")
        if "/" in self.download_filename or "\\" in self.download_filename:
            raise ValueError("download_filename must be a bare file name")
        return self

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_vault_path(self) -> Path:
        """Get the absolute path to the note vault."""
        return self.get_absolute_path(self.vault_path)

    def get_settings_path(self) -> Path:
        """Get the plugin settings file, inside the vault unless overridden."""
        if self.settings_path is not None:
            return self.get_absolute_path(self.settings_path)
        return (
            self.get_vault_path() / ".obsidian" / "plugins" / self.plugin_id / "data.json"
        )

    def get_download_dir(self) -> Path:
        """Get the absolute path to the download directory."""
        return self.get_absolute_path(self.download_dir)


# Create a global config instance
config = CDSyncConfig()
