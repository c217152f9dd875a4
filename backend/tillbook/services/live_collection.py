# Overview: Push-fed, read-synchronously view of one store collection.

from __future__ import annotations

import threading
from typing import Iterator

from .catalog_store import CatalogStore


class LiveCollection:
    """
    Latest full snapshot of a collection, replaced wholesale on every push.

    The cart reads product stock from here at each decision point; the
    committer still re-reads the store itself before writing.
    """

    def __init__(self, store: CatalogStore, collection: str, owner_id: str | None = None):
        self.collection = collection
        self._lock = threading.Lock()
        self._records: dict[int, dict] = {}
        self._unsubscribe = store.subscribe(collection, self._on_snapshot, owner_id=owner_id)

    def _on_snapshot(self, records: list[dict]) -> None:
        fresh = {record["id"]: record for record in records}
        with self._lock:
            self._records = fresh

    def get(self, record_id) -> dict | None:
        if record_id is None:
            return None
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return None
        with self._lock:
            return self._records.get(key)

    def all(self) -> list[dict]:
        with self._lock:
            return list(self._records.values())

    def __iter__(self) -> Iterator[dict]:
        return iter(self.all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def close(self) -> None:
        self._unsubscribe()
