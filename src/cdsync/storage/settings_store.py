"""Persistence for plugin settings.

Settings live in a small JSON key-value file, the way a note app stores
per-plugin data (``.obsidian/plugins/<id>/data.json``). Stored keys are
overlaid on the defaults, so options added later fall back to their default.
"""
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from cdsync.exceptions import ErrorCode, StorageError
from cdsync.models.schema import PluginSettings
from cdsync.storage._files import write_text_atomic

logger = logging.getLogger(__name__)


class SettingsStore:
    """Loads and saves :class:`PluginSettings` as JSON."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> PluginSettings:
        """Load settings, falling back to defaults for anything unusable."""
        if not self.path.exists():
            return PluginSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load settings from {self.path}: {e}")
            return PluginSettings()
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {self.path}: not a JSON object")
            return PluginSettings()

        try:
            return PluginSettings.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid settings in {self.path}, using defaults: {e}")
            return PluginSettings()

    def save(self, settings: PluginSettings) -> None:
        """Persist settings, creating the plugin data directory if needed."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            write_text_atomic(self.path, json.dumps(settings.model_dump(by_alias=True), indent=2))
        except OSError as e:
            raise StorageError(
                "Failed to save plugin settings",
                operation="save_settings",
                path=str(self.path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e
        logger.debug(f"Saved settings to {self.path}")
