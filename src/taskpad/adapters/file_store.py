"""File-based key-value storage adapter."""

import asyncio
import logging
import os
import re
import tempfile
from pathlib import Path

from taskpad.errors import StorageError

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class FileKeyValueStore:
    """
    File-based key-value storage.

    Implements KeyValueStore protocol. Each key gets a JSON file in data_dir;
    writes replace the file atomically so a crash never leaves half a blob.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        if not _VALID_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    async def load(self, key: str) -> str | None:
        """Read the blob for key. Returns None if never written."""
        path = self._path_for_key(key)
        return await asyncio.to_thread(self._read, path)

    async def store(self, key: str, value: str) -> None:
        """Write/overwrite the blob for key."""
        path = self._path_for_key(key)
        await asyncio.to_thread(self._write, path, value)

    def _read(self, path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def _write(self, path: Path, value: str) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.stem}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(value), path)
