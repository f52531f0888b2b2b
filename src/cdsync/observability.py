"""Observability utilities for CDSync.

Provides logging configuration with rotation, timing metrics
and operation tracking.
"""
import logging
import os
import time
import uuid
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Default log directory (can be overridden via configure_logging)
DEFAULT_LOG_DIR = Path.home() / ".cdsync" / "logs"

# Logging format with ISO 8601 timestamps
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    max_bytes: int = 1024 * 1024,  # 1 MB per file
    backup_count: int = 3,
    console: bool = True,
) -> Path:
    """Configure persistent file logging with rotation.

    Sets up a rotating file handler for the ``cdsync`` logger hierarchy.
    Log files are rotated when they reach max_bytes, keeping backup_count old files.

    Args:
        log_dir: Directory for log files. Defaults to ~/.cdsync/logs/
        level: Logging level (default: INFO)
        max_bytes: Maximum size per log file before rotation (default: 1 MB)
        backup_count: Number of rotated files to keep (default: 3)
        console: Also log to console (default: True)

    Returns:
        Path to the log directory
    """
    log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger("cdsync")
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    log_file = log_path / "cdsync.log"
    if not any(
        isinstance(h, RotatingFileHandler)
        and h.baseFilename == os.path.abspath(log_file)
        for h in root_logger.handlers
    ):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Optionally add console handler
    if console and not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
        for h in root_logger.handlers
    ):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.debug(
        f"Logging configured: {log_file} (max {max_bytes} bytes, {backup_count} backups)"
    )

    return log_path


@dataclass
class OperationMetrics:
    """Running totals for one operation name."""
    count: int = 0
    errors: int = 0
    total_ms: float = 0.0
    slowest_ms: float = 0.0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record(self, duration_ms: float, error: Optional[str] = None) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)
        if error is not None:
            self.errors += 1
            self.last_error = error
            self.last_error_at = datetime.now(timezone.utc)

    def snapshot(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'success_count': self.count - self.errors,
            'error_count': self.errors,
            'avg_duration_ms': round(self.total_ms / self.count, 2) if self.count else 0.0,
            'max_duration_ms': round(self.slowest_ms, 2),
            'last_error': self.last_error,
            'last_error_time': self.last_error_at.isoformat() if self.last_error_at else None,
        }


class MetricsCollector:
    """Thread-safe, in-memory operation metrics.

    Operations are keyed by name (``sync_dictionary``);
    the MCP status tool reports them.
    """

    def __init__(self):
        self._operations: Dict[str, OperationMetrics] = defaultdict(OperationMetrics)
        self._lock = Lock()
        self._started = datetime.now(timezone.utc)

    def record_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool,
        error: Optional[str] = None
    ) -> None:
        """Record one finished operation; ``error`` is only kept on failure."""
        with self._lock:
            self._operations[operation].record(
                duration_ms, None if success else (error or "unknown error")
            )

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation snapshot."""
        with self._lock:
            return {name: m.snapshot() for name, m in self._operations.items()}

    def get_summary(self) -> Dict[str, Any]:
        """Totals across all operations since start (or the last reset)."""
        with self._lock:
            total = sum(m.count for m in self._operations.values())
            errors = sum(m.errors for m in self._operations.values())
            return {
                'uptime_seconds': (datetime.now(timezone.utc) - self._started).total_seconds(),
                'total_operations': total,
                'total_errors': errors,
                'overall_success_rate': (total - errors) / total if total else 1.0,
            }

    def reset(self) -> None:
        """Forget everything recorded so far."""
        with self._lock:
            self._operations.clear()
            self._started = datetime.now(timezone.utc)


# Global metrics collector instance
metrics = MetricsCollector()


@contextmanager
def timed_operation(operation: str, **context):
    """Context manager for timing and logging operations.

    Args:
        operation: Name of the operation being performed
        **context: Additional context to include in log messages

    Yields:
        A dictionary where you can store result info (e.g., merged_count)

    Example:
        with timed_operation('sync_dictionary', note='Custom Dictionary.md') as op:
            result = service.sync(picker)
            op['outcome'] = result.outcome.value
    """
    correlation_id = str(uuid.uuid4())[:8]
    start_time = time.perf_counter()
    result_info: Dict[str, Any] = {'correlation_id': correlation_id}

    context_str = ', '.join(f'{k}={v}' for k, v in context.items())
    logger.debug(f"[{correlation_id}] START {operation} ({context_str})")

    error_msg = None
    success = True

    try:
        yield result_info
    except Exception as e:
        success = False
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics.record_operation(operation, duration_ms, success, error_msg)

        result_str = ', '.join(f'{k}={v}' for k, v in result_info.items() if k != 'correlation_id')
        status = 'OK' if success else f'ERROR: {error_msg}'
        logger.debug(
            f"[{correlation_id}] END {operation} "
            f"({duration_ms:.2f}ms) [{status}] {result_str}"
        )
