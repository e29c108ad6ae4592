"""
Local File Storage Implementation

DESIGN DECISION: Each key is one file in the data directory:
    tracker_transactions.json, tracker_budgets.json, tracker_pin.txt, ...

Writes go to a temporary file in the same directory which is then
os.replace()d over the old one. The replace is atomic on POSIX and
Windows, so a crash mid-write leaves the previous snapshot intact.

TRADEOFFS:
- Whole snapshots are rewritten on every change (fine for personal use)
- No file locking (single local user, single process)
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from taka_tracker.config import get_settings
from taka_tracker.services.storage.interface import (
    CorruptDataError,
    PersistentStore,
    StorageReadError,
    StorageWriteError,
    StoreKey,
)
from taka_tracker.telemetry import get_logger


class JsonFileStore(PersistentStore):
    """
    Stores each key as a UTF-8 text file.

    Transient OS errors on write (full disk being cleaned, antivirus holding
    the file) are retried with exponential backoff before giving up.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_seconds: float = 0.1,
    ):
        settings = get_settings()
        self._dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._retry_attempts = retry_attempts or settings.storage_retry_attempts
        self._retry_wait = retry_wait_seconds
        self._logger = get_logger("storage.json_file", data_dir=str(self._dir))

    @property
    def data_dir(self) -> Path:
        return self._dir

    def path_for(self, key: StoreKey) -> Path:
        """File backing a key."""
        suffix = ".json" if key.holds_json else ".txt"
        return self._dir / f"{key.value}{suffix}"

    async def load(self, key: StoreKey) -> Optional[str]:
        """Read a key's file; a missing file means the key was never saved."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise CorruptDataError(key, f"not valid UTF-8 ({e})")
        except OSError as e:
            raise StorageReadError(f"Failed to read {path}: {e}")

    async def save(self, key: StoreKey, raw: str) -> bool:
        """Atomically replace a key's file, retrying transient failures."""
        path = self.path_for(key)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=self._retry_wait, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        self._logger.warning(
                            "storage_write_retry",
                            key=key.value,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    self._write_atomic(path, raw)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}")

        self._logger.debug("storage_saved", key=key.value, size=len(raw))
        return True

    def _write_atomic(self, path: Path, raw: str) -> None:
        """Write to a sibling temp file, fsync it, then swap it in."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(raw)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
