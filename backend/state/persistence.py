"""
Local persistence of adoption sets in a key-value storage.
Storage failures and corrupt payloads are logged and degrade to "no state";
nothing raised by the storage crosses these functions.
"""

import threading
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional, Protocol, Union

import orjson
from loguru import logger

STORAGE_KEY = "cd-practices-adoption"


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Key-value storage backed by a JSON object file. Writes are atomic (.tmp then replace)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        try:
            data = orjson.loads(self.path.read_bytes())
        except FileNotFoundError:
            return {}
        except orjson.JSONDecodeError as e:
            logger.warning("Corrupt storage file {}, treating as empty: {}", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_bytes(orjson.dumps(items, option=orjson.OPT_INDENT_2))
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read()
            items[key] = value
            self._write(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read()
            if key in items:
                del items[key]
                self._write(items)


def save_adoption_state(storage: Storage, ids: Optional[Iterable[str]]) -> None:
    """Store ids as a sorted JSON array. None is stored as []."""
    payload = orjson.dumps(sorted(set(ids or ()))).decode("utf-8")
    try:
        storage.set_item(STORAGE_KEY, payload)
    except Exception as e:
        logger.warning("Failed to save adoption state: {}", e)


def load_adoption_state(storage: Storage) -> Optional[FrozenSet[str]]:
    """Stored ids, or None when absent, corrupt, not an array or unreadable."""
    try:
        raw = storage.get_item(STORAGE_KEY)
    except Exception as e:
        logger.warning("Failed to read adoption state: {}", e)
        return None
    if raw is None:
        return None
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("Corrupt adoption state in storage: {}", e)
        return None
    if not isinstance(data, list):
        logger.warning("Adoption state in storage is not an array")
        return None
    return frozenset(str(item) for item in data if item is not None and item != "")


def clear_adoption_state(storage: Storage) -> None:
    try:
        storage.remove_item(STORAGE_KEY)
    except Exception as e:
        logger.warning("Failed to clear adoption state: {}", e)
