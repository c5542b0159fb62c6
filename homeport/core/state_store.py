"""Persistence of the active catalog URL."""
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from homeport.core.errors import UsageError
from homeport.core.logger import get_logger

logger = get_logger(__name__)

APP_REPO_KEY = "appRepo"


class ConfigStore:
    """Single-record store holding the user's catalog selection.

    Subclasses provide ``_read``/``_write``; ``set`` only touches
    ``appRepo`` and passes every other key through unchanged.
    """

    def get(self) -> Dict[str, Any]:
        """Return the persisted record, or an empty one when unavailable."""
        return self._read()

    def set(self, url: str) -> None:
        """Persist ``url`` as the active catalog.

        Raises:
            UsageError: If url is empty or whitespace
        """
        if not isinstance(url, str) or not url.strip():
            raise UsageError("A repository URL is required")

        record = dict(self._read())
        record[APP_REPO_KEY] = url
        self._write(record)
        logger.debug(f"Active app repo set to {url}")

    def _read(self) -> Dict[str, Any]:
        raise NotImplementedError

    def _write(self, record: Dict[str, Any]) -> None:
        raise NotImplementedError


class JsonConfigStore(ConfigStore):
    """Store backed by a JSON file (``db/user.json``)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to read {self.path}: {e}, treating app repo as unset")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"{self.path} does not hold a JSON object, treating app repo as unset")
            return {}
        return data

    def _write(self, record: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write atomically (write to temp, fsync, then rename)
        temp_file = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            with open(temp_file, 'w') as f:
                json.dump(record, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(self.path)
        except BaseException:
            temp_file.unlink(missing_ok=True)
            raise

        _fsync_directory(self.path.parent)
        logger.debug(f"Saved {self.path}")


class MemoryConfigStore(ConfigStore):
    """In-memory store for tests and dry runs."""

    def __init__(self, record: Optional[Dict[str, Any]] = None):
        self.record: Dict[str, Any] = dict(record or {})

    def _read(self) -> Dict[str, Any]:
        return dict(self.record)

    def _write(self, record: Dict[str, Any]) -> None:
        self.record = dict(record)


def _fsync_directory(directory: Path) -> None:
    """Persist a rename by syncing the directory entry."""
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
