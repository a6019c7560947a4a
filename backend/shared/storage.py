"""Key-value storage for persisted preferences and match history.

Every value is a string; callers encode structured data (JSON) themselves.
The file backend keeps the whole store in one JSON object and rewrites it
atomically via temp-file-then-rename with owner-only permissions (0o600)
inside an owner-only directory (0o700).
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

# Owner-only directory permissions for the storage directory.
_STORAGE_DIR_MODE = 0o700

# Owner-only file permissions for the storage file.
_STORAGE_FILE_MODE = 0o600


class KeyValueStorage(Protocol):
    """Protocol for scalar key-value persistence."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStorage:
    """Process-local storage, used in tests and when persistence is disabled."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStorage:
    """File-backed storage keeping all keys in a single JSON object.

    Loads lazily on first access and writes the whole object back on every
    mutation. A missing file is an empty store. An unreadable or malformed
    file is logged and treated as empty, so the next write replaces it.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._values: dict[str, str] | None = None

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _ensure_loaded(self) -> dict[str, str]:
        if self._values is None:
            self._values = self._load_from_file()
        return self._values

    def _load_from_file(self) -> dict[str, str]:
        if not self._file_path.exists():
            return {}

        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError, OSError):
            logger.warning("storage file unreadable, starting empty", path=str(self._file_path), exc_info=True)
            return {}

        if not isinstance(data, dict):
            logger.warning("storage file is not a JSON object, starting empty", path=str(self._file_path))
            return {}

        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _save_to_file(self, values: dict[str, str]) -> None:
        """Atomically write all keys to the JSON file."""
        parent = self._file_path.parent
        parent.mkdir(mode=_STORAGE_DIR_MODE, parents=True, exist_ok=True)
        content = json.dumps(values, indent=2, ensure_ascii=False).encode("utf-8")

        fd, tmp_path = tempfile.mkstemp(dir=str(parent), prefix=".abacus_", suffix=".tmp")
        fd_owned = True
        try:
            with os.fdopen(fd, "wb") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STORAGE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise

    def get(self, key: str) -> str | None:
        return self._ensure_loaded().get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value. The in-memory copy is only updated once the file write succeeded."""
        values = {**self._ensure_loaded(), key: value}
        self._save_to_file(values)
        self._values = values

    def delete(self, key: str) -> None:
        current = self._ensure_loaded()
        if key not in current:
            return
        values = {k: v for k, v in current.items() if k != key}
        self._save_to_file(values)
        self._values = values
