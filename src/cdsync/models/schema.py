"""Data models for CDSync."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class PluginSettings(BaseModel):
    """Persisted plugin options.

    Stored under the host's camelCase keys (``toLowerCase``) so an existing
    plugin data file keeps working.
    """

    to_lower_case: bool = Field(
        default=True,
        validation_alias=AliasChoices("toLowerCase", "to_lower_case"),
        serialization_alias="toLowerCase",
        description="Convert first-letter-capped words to lower case",
    )

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
        "populate_by_name": True,
    }


class SyncOutcome(str, Enum):
    """How a sync invocation ended."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NOTE_MISSING = "note_missing"


@dataclass(frozen=True)
class PickResult:
    """Result of asking the user for the external word list.

    Attributes:
        path: The selected file, or None when the user cancelled.
    """

    path: Optional[Path] = None

    @property
    def cancelled(self) -> bool:
        return self.path is None

    @classmethod
    def cancel(cls) -> "PickResult":
        return cls(path=None)


class SyncResult(BaseModel):
    """Summary of a single sync invocation."""

    outcome: SyncOutcome = Field(..., description="How the sync ended")
    note_entries: int = Field(default=0, description="Entries read from the note")
    external_entries: int = Field(
        default=0, description="Entries read from the external word list"
    )
    merged_entries: int = Field(default=0, description="Entries in the merged set")
    added_to_note: int = Field(
        default=0, description="Merged entries the note did not hold before"
    )
    added_to_external: int = Field(
        default=0, description="Merged entries the external list did not hold before"
    )
    note_path: Optional[Path] = Field(default=None, description="Rewritten note")
    download_path: Optional[Path] = Field(
        default=None, description="Delivered merged word list"
    )
    notices: List[str] = Field(
        default_factory=list, description="Messages shown to the user"
    )

    model_config = {"extra": "forbid"}

    @property
    def completed(self) -> bool:
        return self.outcome == SyncOutcome.COMPLETED
