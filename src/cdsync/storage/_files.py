"""Shared file helpers for the storage layer."""
import os
import shutil
from pathlib import Path


def write_text_atomic(path: Path, text: str) -> None:
    """Write UTF-8 text by staging next to the target and renaming over it."""
    staging_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with open(staging_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        try:
            # POSIX atomic rename (same filesystem)
            staging_path.replace(path)
        except OSError:
            # Cross-filesystem fallback
            shutil.move(str(staging_path), str(path))
    finally:
        if staging_path.exists():
            staging_path.unlink()
