"""The external word list: choosing it, reading it, and delivering the result.

The merged list is never written back to the file the user picked. It is
delivered as a download with a fixed name, the way a browser-hosted app
hands a file to the user.
"""
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from cdsync.exceptions import ErrorCode, ExternalFileReadError, StorageError
from cdsync.models.schema import PickResult
from cdsync.storage._files import write_text_atomic

logger = logging.getLogger(__name__)


class FilePicker(Protocol):
    """Asks the user for a single file; returns a cancelled result if none is chosen."""

    def pick(self) -> PickResult:
        ...


class StaticFilePicker:
    """Picker with a predetermined answer (CLI flag or tool argument).

    A ``None`` path behaves like a dismissed dialog.
    """

    def __init__(self, path: Optional[Union[str, Path]]) -> None:
        self._path = Path(path).expanduser() if path else None

    def pick(self) -> PickResult:
        return PickResult(path=self._path)


class PromptFilePicker:
    """Interactive picker that asks for a path on the terminal.

    An empty answer, or end of input, cancels.
    """

    def __init__(
        self,
        input_func: Optional[Callable[[str], str]] = None,
        prompt: str = "Word list to merge (blank to cancel): ",
    ) -> None:
        self._input = input_func or input
        self._prompt = prompt

    def pick(self) -> PickResult:
        try:
            answer = self._input(self._prompt)
        except (EOFError, KeyboardInterrupt):
            return PickResult.cancel()
        # Terminals quote dragged-in paths
        answer = answer.strip().strip("'\"")
        if not answer:
            return PickResult.cancel()
        return PickResult(path=Path(answer).expanduser())


def read_external_file(path: Union[str, Path]) -> str:
    """Read the picked word list as UTF-8 text.

    A byte order mark is dropped and undecodable bytes are replaced,
    matching how a browser file reader decodes text.

    Raises:
        ExternalFileReadError: If the file cannot be read.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        reason = e.strerror or str(e)
        raise ExternalFileReadError(reason, path=str(path), original_error=e) from e
    return raw.decode("utf-8-sig", errors="replace")


class DownloadWriter:
    """Delivers the merged word list under a fixed file name."""

    def __init__(self, download_dir: Path, filename: str) -> None:
        self.download_dir = Path(download_dir)
        self.filename = filename

    @property
    def path(self) -> Path:
        return self.download_dir / self.filename

    def deliver(self, text: str) -> Path:
        """Write ``text`` to the download location, replacing any earlier copy.

        Raises:
            StorageError: If the file cannot be written.
        """
        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            write_text_atomic(self.path, text)
        except OSError as e:
            raise StorageError(
                f"Failed to deliver '{self.filename}'",
                operation="deliver_download",
                path=str(self.path),
                code=ErrorCode.DOWNLOAD_FAILED,
                original_error=e,
            ) from e
        logger.info(f"Delivered merged word list: {self.path}")
        return self.path
