"""
Adoption store - the single owner of the mutable adoption set.

Writes go through initialize/toggle/import_practices/clear_all only. Every write
rewrites the URL immediately and schedules a debounced storage write.
"""

import threading
from typing import Callable, FrozenSet, Iterable, List, Optional

from loguru import logger

from config import PERSIST_DEBOUNCE_MS
from state.persistence import MemoryStorage, Storage, load_adoption_state, save_adoption_state
from state.url_state import get_adoption_state_from_url, update_url_with_adoption_state

from . import engine

Listener = Callable[[FrozenSet[str]], None]


class AdoptionStore:
    def __init__(
        self,
        storage: Optional[Storage] = None,
        url: str = "/",
        persist_delay_ms: int = PERSIST_DEBOUNCE_MS,
        replace_url: Optional[Callable[[str], None]] = None,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.url = url
        self.persist_delay_ms = persist_delay_ms
        self._replace_url = replace_url
        self._value: FrozenSet[str] = frozenset()
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[FrozenSet[str]] = None

    # -- reads --------------------------------------------------------------

    @property
    def value(self) -> FrozenSet[str]:
        return self._value

    @property
    def count(self) -> int:
        return len(self._value)

    def get_count(self) -> int:
        return self.count

    def is_adopted(self, practice_id: str) -> bool:
        return practice_id in self._value

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register callback; it is called now and after every change."""
        self._listeners.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def subscribe_count(self, callback: Callable[[int], None]) -> Callable[[], None]:
        return self.subscribe(lambda value: callback(len(value)))

    # -- writes -------------------------------------------------------------

    def initialize(self, valid_ids: Iterable[str]) -> FrozenSet[str]:
        """Load state with precedence URL > storage > empty, keeping only valid ids."""
        valid = frozenset(valid_ids or ())
        from_url = get_adoption_state_from_url(self.url)
        if from_url is not None:
            initial = engine.filter_valid_practice_ids(from_url, valid)
            self._set(initial)
            self._sync_url()
            self._persist_now(initial)
            return initial

        stored = load_adoption_state(self.storage)
        if stored is not None:
            initial = engine.filter_valid_practice_ids(stored, valid)
            self._set(initial)
            self._sync_url()
            return initial

        self._set(frozenset())
        return self._value

    def toggle(self, practice_id: str) -> FrozenSet[str]:
        return self._write(engine.toggle(self._value, practice_id))

    def import_practices(self, ids: Iterable[str]) -> FrozenSet[str]:
        """Replace the whole set."""
        return self._write(frozenset(ids or ()))

    def clear_all(self) -> FrozenSet[str]:
        return self._write(frozenset())

    def flush(self) -> None:
        """Write any pending state to storage now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending, self._pending = self._pending, None
        if pending is not None:
            save_adoption_state(self.storage, pending)

    # -- internals ----------------------------------------------------------

    def _write(self, value: FrozenSet[str]) -> FrozenSet[str]:
        self._set(value)
        self._sync_url()
        self._schedule_persist(value)
        return value

    def _set(self, value: FrozenSet[str]) -> None:
        self._value = value
        for callback in list(self._listeners):
            callback(value)

    def _sync_url(self) -> None:
        self.url = update_url_with_adoption_state(self.url, self._value)
        if self._replace_url is not None:
            self._replace_url(self.url)

    def _persist_now(self, value: FrozenSet[str]) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None
        save_adoption_state(self.storage, value)

    def _schedule_persist(self, value: FrozenSet[str]) -> None:
        if self.persist_delay_ms <= 0:
            self._persist_now(value)
            return
        with self._lock:
            self._pending = value
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.persist_delay_ms / 1000.0, self.flush)
            self._timer.daemon = True
            self._timer.start()
        logger.debug("Adoption state write scheduled in {} ms", self.persist_delay_ms)
