"""
JSON File Storage Implementation

Each key is stored as one JSON file inside a data directory.

DESIGN DECISION: Writes go to a temporary file in the same directory
which then atomically replaces the target. A crash mid-write leaves
the previous blob intact, so a reload never sees a partial write.

Transient OS errors (locked files, full buffers) are retried a few
times with exponential backoff before surfacing as StorageWriteError.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budgetup.services.storage.interface import (
    StorageBackend,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]")


class JSONFileStorage(StorageBackend):
    """
    File-per-key storage under a data directory.

    Keys are sanitized into file names: "budgetup-financial-store"
    becomes "budgetup-financial-store.json".
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File path holding a key."""
        if not key:
            raise ValueError("Storage key must not be empty")
        return self._data_dir / f"{_SAFE_KEY.sub('_', key)}.json"

    async def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}")

    async def write(self, key: str, payload: str) -> None:
        path = self.path_for(key)
        try:
            self._write_atomic(path, payload)
        except OSError as e:
            logger.error("storage_write_failed", path=str(path), error=str(e))
            raise StorageWriteError(f"Failed to write {path}: {e}")

    async def remove(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_atomic(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            # Leave no stray temp files behind
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
