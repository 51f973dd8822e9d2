"""
In-memory record store.

Used by tests and as the base of the JSON file store. Every operation holds
a single lock, so set_add/set_remove behave as atomic set operations.
"""

import copy
import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from genmemo.domain.interfaces import RecordKey, RecordStore


class InMemoryRecordStore(RecordStore):
    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._records: dict[RecordKey, dict[str, Any]] = {}
        self._sets: dict[str, set[str]] = {}

    def get(self, key: RecordKey) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def put(self, key: RecordKey, value: dict[str, Any]) -> None:
        with self._mutation():
            self._records[key] = copy.deepcopy(value)

    def put_many(self, entries: dict[RecordKey, dict[str, Any]]) -> None:
        with self._mutation():
            self._records.update({k: copy.deepcopy(v) for k, v in entries.items()})

    def delete(self, key: RecordKey) -> None:
        with self._lock:
            if key not in self._records:
                return
            with self._mutation():
                del self._records[key]

    def keys(self, namespace: str, collection_id: str) -> list[int]:
        with self._lock:
            return sorted(
                item_key
                for (ns, cid, item_key) in self._records
                if ns == namespace and cid == collection_id
            )

    def set_members(self, name: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._sets.get(name, ()))

    def set_add(self, name: str, members: Iterable[str]) -> None:
        with self._mutation():
            self._sets.setdefault(name, set()).update(members)

    def set_remove(self, name: str, members: Iterable[str]) -> None:
        with self._lock:
            if name not in self._sets:
                return
            with self._mutation():
                current = self._sets[name]
                current.difference_update(members)
                if not current:
                    del self._sets[name]

    def set_clear(self, name: str) -> None:
        with self._lock:
            if name not in self._sets:
                return
            with self._mutation():
                del self._sets[name]

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """
        Apply a change and persist it, all or nothing.

        If the body or `_changed` raises, records and sets are restored to
        their state before the change.
        """
        with self._lock:
            records = dict(self._records)
            sets = {name: set(members) for name, members in self._sets.items()}
            try:
                yield
                self._changed()
            except Exception:
                self._records = records
                self._sets = sets
                raise

    def _changed(self) -> None:
        """Hook called under the lock after every mutation."""
        pass
