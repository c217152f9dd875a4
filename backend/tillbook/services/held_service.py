# Overview: Park the active cart for later and bring parked carts back.

from __future__ import annotations

import logging

from ..errors import EmptyCart, NotFound, ValidationError
from tillbook.time_utils import utcnow
from .catalog_store import CatalogStore
from .concurrency import guarded_write
from .session_service import TerminalSession

logger = logging.getLogger(__name__)

COLLECTION = "held_carts"


def hold(session: TerminalSession, store: CatalogStore) -> dict:
    """
    Snapshot the cart and customer selection under the operator's id, then
    clear the cart. The cart is left alone if the store write fails.
    """
    if session.cart.is_empty():
        raise EmptyCart("Cart is empty. Nothing to hold.")
    if not session.operator_id:
        raise ValidationError("Please log in to hold transactions.")

    snapshot = session.cart.snapshot()

    def _op():
        held_id = store.create(COLLECTION, {
            "created_at": utcnow(),
            "items": snapshot["items"],
            "customer_id": snapshot["customer_id"],
            "customer_name": session.customer_name(),
            "customer_class": snapshot["customer_class"],
        }, owner_id=session.operator_id)
        return store.get(COLLECTION, held_id, owner_id=session.operator_id)

    held = guarded_write(_op)
    session.clear()
    logger.info("Cart held as %s by %s", held["id"], session.operator_id)
    return held


def list_held(session: TerminalSession, store: CatalogStore) -> list[dict]:
    held = store.list_all(COLLECTION, owner_id=session.operator_id)
    return sorted(held, key=lambda h: (h["created_at"] or "", h["id"]), reverse=True)


def resume(session: TerminalSession, store: CatalogStore, held_id: int) -> dict:
    """
    Replace the active cart with a held one and delete the held record.

    The record is deleted first; the in-memory cart only changes once that
    write has gone through.
    """
    held = store.get(COLLECTION, held_id, owner_id=session.operator_id)
    if held is None:
        raise NotFound(f"Held transaction {held_id} not found", details={"held_id": held_id})

    def _op():
        store.delete(COLLECTION, held_id, owner_id=session.operator_id)

    guarded_write(_op)

    session.clear()
    session.cart.restore(held)
    logger.info("Held cart %s resumed by %s", held_id, session.operator_id)
    return held


def discard(session: TerminalSession, store: CatalogStore, held_id: int) -> None:
    """Delete a held cart without restoring it. Confirmation is the caller's job."""
    if store.get(COLLECTION, held_id, owner_id=session.operator_id) is None:
        raise NotFound(f"Held transaction {held_id} not found", details={"held_id": held_id})

    guarded_write(lambda: store.delete(COLLECTION, held_id, owner_id=session.operator_id))
    logger.info("Held cart %s discarded by %s", held_id, session.operator_id)
