"""JSON file storage for single-record app state."""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from calorie_estimator.domain.errors import PersistenceFailureError
from calorie_estimator.services.history import KeyValueStorage


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Stores each key as ``<directory>/<key>.json``."""

    directory: Path

    def read(self, key: str) -> str | None:
        """Return the file content for a key."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceFailureError(f"Failed to read {path}") from exc

    def write(self, key: str, value: str) -> None:
        """Atomically replace the file for a key."""
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        except OSError as exc:
            raise PersistenceFailureError(f"Failed to write {path}") from exc
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            tmp_path.replace(path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceFailureError(f"Failed to write {path}") from exc

    def remove(self, key: str) -> None:
        """Delete the file for a key if present."""
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceFailureError(f"Failed to remove {path}") from exc

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"
