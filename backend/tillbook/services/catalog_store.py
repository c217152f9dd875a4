# Overview: Collection-oriented document store over the SQL models, with push subscriptions.

"""
Catalog Store

Records cross this boundary as plain dicts (each model's to_dict()), so the
till never holds ORM rows between calls.

INVARIANTS:
- Writes outside `atomic()` commit immediately.
- Writes inside `atomic()` are flushed, and committed (or rolled back) as one
  unit when the outermost block exits.
- Subscribers get a full snapshot of the collection once on subscribe and
  again after every commit that touched it. Rolled-back writes notify no one.
- `held_carts` is scoped per owner: every call on it needs an owner_id.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable

from ..extensions import db
from ..errors import NotFound, ValidationError
from ..models import Product, Supplier, Customer, Sale, Expense, HeldCart
from .concurrency import lock_for_update

logger = logging.getLogger(__name__)


COLLECTIONS = {
    "products": Product,
    "suppliers": Supplier,
    "customers": Customer,
    "sales": Sale,
    "expenses": Expense,
    "held_carts": HeldCart,
}

OWNER_SCOPED = {"held_carts"}

# Columns the store manages itself
_READ_ONLY_FIELDS = {"id", "owner_id", "version_id", "updated_at"}

Snapshot = list[dict]
Callback = Callable[[Snapshot], None]


class CatalogStore:
    """Store boundary: list_all / get / create / update / delete / subscribe."""

    def __init__(self):
        # (collection, owner_id) -> callbacks
        self._subscribers: dict[tuple[str, str | None], list[Callback]] = {}
        self._subscribers_lock = threading.Lock()
        # Transaction nesting is tracked per thread (one request per thread)
        self._local = threading.local()

    @property
    def _depth(self) -> int:
        return getattr(self._local, "depth", 0)

    @_depth.setter
    def _depth(self, value: int) -> None:
        self._local.depth = value

    @property
    def _dirty(self) -> set:
        if not hasattr(self._local, "dirty"):
            self._local.dirty = set()
        return self._local.dirty

    @_dirty.setter
    def _dirty(self, value: set) -> None:
        self._local.dirty = value

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_all(self, collection: str, owner_id: str | None = None) -> Snapshot:
        model = self._model(collection, owner_id)
        query = db.session.query(model)
        if collection in OWNER_SCOPED:
            query = query.filter_by(owner_id=owner_id)
        # Always read through to the database; other sessions may have written
        query = query.populate_existing()
        return [row.to_dict() for row in query.order_by(model.id).all()]

    def get(
        self,
        collection: str,
        record_id: int,
        owner_id: str | None = None,
        for_update: bool = False,
    ) -> dict | None:
        row = self._row(collection, record_id, owner_id, for_update=for_update)
        return row.to_dict() if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, collection: str, fields: dict, owner_id: str | None = None) -> int:
        model = self._model(collection, owner_id)
        values = self._clean_fields(model, fields)
        if collection in OWNER_SCOPED:
            values["owner_id"] = owner_id

        row = model(**values)
        db.session.add(row)
        db.session.flush()
        self._touched(collection)
        return row.id

    def update(self, collection: str, record_id: int, fields: dict, owner_id: str | None = None) -> dict:
        row = self._row(collection, record_id, owner_id)
        if row is None:
            raise NotFound(f"{collection} record {record_id} not found")

        for key, value in self._clean_fields(type(row), fields).items():
            setattr(row, key, value)
        db.session.flush()
        self._touched(collection)
        return row.to_dict()

    def delete(self, collection: str, record_id: int, owner_id: str | None = None) -> None:
        row = self._row(collection, record_id, owner_id)
        if row is None:
            raise NotFound(f"{collection} record {record_id} not found")

        db.session.delete(row)
        db.session.flush()
        self._touched(collection)

    @contextmanager
    def atomic(self):
        """
        Group writes into a single transaction.

        Nested blocks join the outermost one.
        """
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                db.session.commit()
        except BaseException:
            if self._depth == 1:
                db.session.rollback()
                self._dirty.clear()
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            self._flush_notifications()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, collection: str, callback: Callback, owner_id: str | None = None) -> Callable[[], None]:
        """
        Register `callback` for full-snapshot updates. Returns an unsubscribe
        function. The current snapshot is delivered before returning.
        """
        self._model(collection, owner_id)
        key = (collection, owner_id if collection in OWNER_SCOPED else None)
        with self._subscribers_lock:
            self._subscribers.setdefault(key, []).append(callback)
        callback(self.list_all(collection, owner_id=key[1]))

        def unsubscribe() -> None:
            with self._subscribers_lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(key, None)

        return unsubscribe

    def subscriber_count(self, collection: str) -> int:
        with self._subscribers_lock:
            return sum(len(cbs) for (name, _), cbs in self._subscribers.items() if name == collection)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _model(self, collection: str, owner_id: str | None):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise ValidationError(f"Unknown collection: {collection}")
        if collection in OWNER_SCOPED and not owner_id:
            raise ValidationError(f"Collection {collection} requires an owner")
        return model

    def _row(self, collection: str, record_id: int, owner_id: str | None, for_update: bool = False):
        model = self._model(collection, owner_id)
        query = db.session.query(model).filter_by(id=record_id)
        if collection in OWNER_SCOPED:
            query = query.filter_by(owner_id=owner_id)
        if for_update:
            query = lock_for_update(query)
        return query.populate_existing().first()

    @staticmethod
    def _clean_fields(model, fields: dict) -> dict[str, Any]:
        columns = {c.key for c in model.__mapper__.columns}
        unknown = set(fields) - columns
        if unknown:
            raise ValidationError(
                f"Unknown fields for {model.__tablename__}: {', '.join(sorted(unknown))}"
            )
        return {k: v for k, v in fields.items() if k not in _READ_ONLY_FIELDS}

    def _touched(self, collection: str) -> None:
        self._dirty.add(collection)
        if self._depth == 0:
            db.session.commit()
            self._flush_notifications()

    def _flush_notifications(self) -> None:
        dirty, self._dirty = self._dirty, set()
        # Callbacks run outside the lock so they may subscribe or unsubscribe
        with self._subscribers_lock:
            targets = [
                (key, list(callbacks))
                for key, callbacks in self._subscribers.items()
                if key[0] in dirty and callbacks
            ]
        for (collection, owner_id), callbacks in targets:
            snapshot = self.list_all(collection, owner_id=owner_id)
            for callback in callbacks:
                try:
                    callback(snapshot)
                except Exception:
                    # Already committed; listener failures are only logged
                    logger.exception("Subscriber for %s failed", collection)
