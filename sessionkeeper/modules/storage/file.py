import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..session.errors import InitializationError

logger = logging.getLogger(__name__)

FILE_PREFIX = "sess_"
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class FileStorage:
    """Directory holding one file per session id."""

    def __init__(self, path: Union[str, Path] = "temp"):
        """
        Initialize file storage.

        Args:
            path: Directory for session files, created on open()
        """
        self.path = Path(path)

    def open(self) -> None:
        """Create the directory if needed and check it is writable."""
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create session directory {self.path}: {e}")
            raise InitializationError(f"Unable to start session: cannot create {self.path}") from e

        if not os.access(self.path, os.W_OK | os.X_OK):
            logger.error(f"Session directory {self.path} is not writable")
            raise InitializationError(f"Unable to start session: {self.path} is not writable")

    def read(self, session_id: str) -> Optional[bytes]:
        try:
            return self._file_for(session_id).read_bytes()
        except FileNotFoundError:
            return None

    def write(self, session_id: str, data: bytes) -> None:
        """Write atomically: temp file in the same directory, then rename."""
        target = self._file_for(session_id)
        fd, tmp_name = tempfile.mkstemp(dir=self.path, prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def delete(self, session_id: str) -> None:
        try:
            self._file_for(session_id).unlink()
        except FileNotFoundError:
            pass

    def close(self) -> None:
        """Nothing to release: files are opened per operation."""

    def _file_for(self, session_id: str) -> Path:
        if not _SAFE_ID.match(session_id):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self.path / f"{FILE_PREFIX}{session_id}"
