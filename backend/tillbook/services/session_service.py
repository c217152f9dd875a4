# Overview: Per-operator terminal session holding the cart and payment inputs.

"""
Terminal Sessions

One operator drives one terminal: one cart and one pending payment, no
hidden globals. Every core operation takes the session explicitly.

The registry keeps sessions alive between HTTP requests and owns their live
catalog subscriptions.
"""

from __future__ import annotations

import logging
import threading
import time

from ..errors import PrivilegeDenied, ValidationError
from .cart_service import Cart
from .catalog_store import CatalogStore
from .live_collection import LiveCollection
from .payment_service import PendingPayment, preview

logger = logging.getLogger(__name__)

WALK_IN_NAME = "Walk-in Customer"
UNKNOWN_CUSTOMER_NAME = "Unknown Customer"


class TerminalSession:
    def __init__(self, operator_id: str, is_privileged: bool, products, customers):
        if not operator_id:
            raise ValidationError("An operator identity is required")
        self.operator_id = str(operator_id)
        self.is_privileged = bool(is_privileged)
        self.products = products
        self.customers = customers
        self.cart = Cart(products)
        self.payment = PendingPayment()

    def require_privilege(self, action: str) -> None:
        if not self.is_privileged:
            raise PrivilegeDenied(f"Admin privilege required to {action}.")

    def select_customer(self, customer_id) -> None:
        if customer_id not in (None, "") and self.customers.get(customer_id) is None:
            raise ValidationError(f"Customer {customer_id} not found")
        self.cart.select_customer(customer_id)

    def set_customer_class(self, customer_class: str) -> None:
        self.cart.set_customer_class(customer_class)

    def set_payment_method(self, method: str) -> None:
        self.payment.set_method(method)

    def set_payment_amounts(self, **amounts) -> None:
        self.payment.set_amounts(**amounts)

    def customer_name(self) -> str:
        if self.cart.customer_id is None:
            return WALK_IN_NAME
        customer = self.customers.get(self.cart.customer_id)
        return customer["name"] if customer else UNKNOWN_CUSTOMER_NAME

    def clear(self) -> None:
        """Empty the cart and reset to walk-in, retail, cash."""
        self.cart.clear()
        self.payment.reset()

    def snapshot(self) -> dict:
        cart = self.cart
        customer = self.customers.get(cart.customer_id) if cart.customer_id is not None else None
        return {
            "operator_id": self.operator_id,
            "is_privileged": self.is_privileged,
            "items": cart.item_snapshot(),
            "customer_id": cart.customer_id,
            "customer_name": self.customer_name(),
            "customer_credit": customer["credit"] if customer else None,
            "customer_class": cart.customer_class,
            "subtotal": cart.subtotal(),
            "total": cart.total(),
            "profit": cart.profit(),
            "payment": self.payment.to_dict(),
            "payment_preview": preview(cart.total(), self.payment),
        }


class SessionRegistry:
    """
    Terminal sessions keyed by operator id.

    A session left untouched for `idle_timeout` seconds is closed (its cart
    is dropped and its live feeds unsubscribed) the next time any operator
    is looked up. None disables expiry.
    """

    def __init__(self, store: CatalogStore, idle_timeout: float | None = None, clock=time.monotonic):
        self._store = store
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, TerminalSession] = {}
        self._feeds: dict[str, tuple[LiveCollection, LiveCollection]] = {}
        self._last_seen: dict[str, float] = {}

    def get_or_create(self, operator_id: str, is_privileged: bool = False) -> TerminalSession:
        key = str(operator_id)
        with self._lock:
            now = self._clock()
            self._expire_idle(now, keep=key)
            session = self._sessions.get(key)
            if session is None:
                products = LiveCollection(self._store, "products")
                customers = LiveCollection(self._store, "customers")
                session = TerminalSession(key, is_privileged, products, customers)
                self._sessions[key] = session
                self._feeds[key] = (products, customers)
            else:
                # Privilege comes from the auth layer on every request
                session.is_privileged = bool(is_privileged)
            self._last_seen[key] = now
            return session

    def close(self, operator_id: str) -> bool:
        """Drop an operator's session. Returns False if none was open."""
        with self._lock:
            return self._drop(str(operator_id))

    def close_all(self) -> None:
        with self._lock:
            for key in list(self._sessions):
                self._drop(key)

    def _expire_idle(self, now: float, keep: str) -> None:
        if self._idle_timeout is None:
            return
        stale = [
            key for key, seen in self._last_seen.items()
            if key != keep and now - seen >= self._idle_timeout
        ]
        for key in stale:
            self._drop(key)
            logger.info("Closed idle terminal session for %s", key)

    def _drop(self, key: str) -> bool:
        session = self._sessions.pop(key, None)
        self._last_seen.pop(key, None)
        for feed in self._feeds.pop(key, ()):
            feed.close()
        return session is not None

    def __contains__(self, operator_id) -> bool:
        return str(operator_id) in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
