"""
JSON file persistence for the collection store.

The whole store is one JSON document. Every save rewrites the file in a single
write; there is no locking and the write is not atomic.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for persistence failures."""


class CorruptDataError(StorageError):
    """Raised when the data file exists but cannot be decoded into a store."""


class PersistenceError(StorageError):
    """Raised when the store cannot be written to the data file."""


class JsonStorage:
    """Reads and writes the complete store as one JSON blob."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> dict:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptDataError(f"{self.path} is not valid UTF-8 text") from exc
        except OSError as exc:
            raise StorageError(f"Unable to read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptDataError(f"{self.path} does not contain valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise CorruptDataError(f"{self.path} must contain a JSON object at the top level")
        return data

    def save(self, data: dict) -> None:
        try:
            payload = json.dumps(data, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Store is not JSON serializable: {exc}") from exc
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to write %s", self.path)
            raise PersistenceError(f"Unable to write {self.path}: {exc}") from exc


def read_schema_file(path: str | Path) -> dict:
    """Load an initial schema definition (same layout as the data file)."""
    return JsonStorage(path).load()
