# studyjam/storage/stable_index_store.py
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


class PersistenceError(Exception):
    """Raised when a key/value store cannot be read or written."""

    pass


class KeyValueStore(ABC):
    """Small JSON key/value store, the local counterpart of browser storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Returns the JSON value stored under key, or None when absent.

        Raises:
            PersistenceError: The store could not be read.
        """
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Stores a JSON-serializable value under key.

        Raises:
            PersistenceError: The store could not be written.
        """
        pass


class InMemoryStore(KeyValueStore):
    """Non-persistent store; values live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.put(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def put(self, key: str, value: Any) -> None:
        # Round-trip through JSON so callers never share mutable state with the store
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Value for {key} is not JSON serializable: {e}") from e


class JsonFileStore(KeyValueStore):
    """Keeps every key in one JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def put(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
        logger.debug(f"Saved key {key} to {self.path}")
