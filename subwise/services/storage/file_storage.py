"""
Local File Storage Implementation

Each key is a single ``<key>.json`` file under the data directory.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, so a crash mid-write leaves the previous
value intact rather than a truncated file.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from subwise.services.storage.interface import (
    BlobStorageInterface,
    PersistenceFailure,
    StorageError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileBlobStorage(BlobStorageInterface):
    """Stores each blob as a file in ``data_dir``."""

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """Resolve a key to its file, rejecting anything path-like."""
        if not _KEY_PATTERN.match(key) or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            # Undecodable bytes surface as garbage text; the store treats
            # that as malformed data rather than a storage fault.
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._write_atomic(path, value)
        except OSError as e:
            raise PersistenceFailure(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
