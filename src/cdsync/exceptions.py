"""Custom exceptions for CDSync.

Provides a structured exception hierarchy with error codes and
machine-readable error information for better error handling.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Dictionary note errors (1xxx)
    NOTE_NOT_FOUND = 1001
    NOTE_UNREADABLE = 1002

    # External word list errors (2xxx)
    EXTERNAL_READ_FAILED = 2001

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002
    DOWNLOAD_FAILED = 4003

    # Sync errors (5xxx)
    SYNC_IN_PROGRESS = 5001

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001


class CDSyncError(Exception):
    """Base exception for all CDSync errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


def _path_hint(path: str) -> str:
    # Only the final component goes into error details
    return path.replace("\\", "/").split("/")[-1]


class DictionaryNoteNotFoundError(CDSyncError):
    """Raised when the dictionary note is absent or cannot be read."""

    def __init__(
        self,
        note_name: str,
        message: Optional[str] = None,
        code: ErrorCode = ErrorCode.NOTE_NOT_FOUND,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {"note": note_name}
        if original_error:
            details["original_error"] = str(original_error)[:200]
        super().__init__(
            message or f"Dictionary note '{note_name}' not found",
            code=code,
            details=details
        )
        self.note_name = note_name
        self.original_error = original_error


class ExternalFileReadError(CDSyncError):
    """Raised when the selected word list cannot be read.

    The message carries the underlying reader's error message.
    """

    def __init__(
        self,
        reason: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if path:
            details["path_hint"] = _path_hint(path)
        super().__init__(
            f"Error reading file: {reason}",
            code=ErrorCode.EXTERNAL_READ_FAILED,
            details=details
        )
        self.reason = reason
        self.path = path
        self.original_error = original_error


class StorageError(CDSyncError):
    """Raised for storage/persistence errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if path:
            # Don't expose full paths in error messages
            details["path_hint"] = _path_hint(path)
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class ConfigurationError(CDSyncError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key


class SyncInProgressError(CDSyncError):
    """Raised when a sync is triggered while another one is still running."""

    def __init__(self, message: str = "A dictionary sync is already in progress"):
        super().__init__(message, code=ErrorCode.SYNC_IN_PROGRESS)
