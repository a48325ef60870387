"""
Local JSON File Storage

DESIGN DECISION: Each storage key is one file, `<data_dir>/<key>.json`.
The tracker only ever has four documents, and keeping them as separate
files means a corrupt expenses file cannot take the settings down with it.

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a crash mid-write leaves the old value intact.
Transient OS errors are retried with tenacity before giving up.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadFailure,
    PersistenceWriteFailure,
)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not key or not _SAFE_KEY.match(key) or key.startswith("."):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class JsonFileStorage(KeyValueStorageInterface):
    """File-per-key storage in a local directory."""

    def __init__(self, data_dir: Path, write_attempts: int = 3):
        self._data_dir = Path(data_dir)
        self._write_attempts = write_attempts

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        return self._data_dir / f"{_check_key(key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadFailure(key, f"Failed to read {path}: {e}")

    def _write_file(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_file(path, value)
        except OSError as e:
            raise PersistenceWriteFailure(key, f"Failed to write {path}: {e}")

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceWriteFailure(key, f"Failed to delete {path}: {e}")

    def keys(self) -> list[str]:
        if not self._data_dir.exists():
            return []
        return sorted(p.stem for p in self._data_dir.glob("*.json"))


class InMemoryStorage(KeyValueStorageInterface):
    """
    Dictionary-backed storage.

    Used by tests and for sessions that should not touch disk.
    Survives "restarts" as long as the same instance is reused.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)
