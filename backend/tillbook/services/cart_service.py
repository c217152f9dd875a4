# Overview: The active cart; quantity bounds are checked against live stock on every change.

"""
Cart

Lines keep insertion order. Prices are snapshotted when a line is added (for
display and the receipt) but totals are always priced with the cart's
*current* customer class, so switching retail/wholesale re-prices every line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict

from ..errors import StockExceeded, ValidationError
from ..money import to_amount
from .pricing_service import (
    CUSTOMER_CLASS_RETAIL,
    VALID_CUSTOMER_CLASSES,
    unit_price,
    unit_margin,
)

logger = logging.getLogger(__name__)


@dataclass
class CartLineItem:
    product_id: int
    name: str
    purchase_price: int
    bulk_price: int
    individual_price: int
    quantity: int = 1

    @classmethod
    def from_product(cls, product: dict) -> "CartLineItem":
        return cls(
            product_id=product["id"],
            name=product.get("name") or "",
            purchase_price=to_amount(product.get("purchase_price")),
            bulk_price=to_amount(product.get("bulk_price")),
            individual_price=to_amount(product.get("individual_price")),
            quantity=1,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        return cls(
            product_id=data.get("id", data.get("product_id")),
            name=data.get("name") or "",
            purchase_price=to_amount(data.get("purchase_price")),
            bulk_price=to_amount(data.get("bulk_price")),
            individual_price=to_amount(data.get("individual_price")),
            quantity=int(data.get("quantity") or 0),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["id"] = data.pop("product_id")
        return data


class Cart:
    """
    `products` is any live catalog exposing get(product_id) -> dict | None.
    """

    def __init__(self, products):
        self._products = products
        self.lines: list[CartLineItem] = []
        self.customer_id: int | None = None
        self.customer_class: str = CUSTOMER_CLASS_RETAIL

    # ------------------------------------------------------------------
    # Line operations
    # ------------------------------------------------------------------

    def add_item(self, product_id) -> str | None:
        """
        Add one unit of a product.

        Returns a warning (and changes nothing) when the product is unknown
        or out of stock. Raises StockExceeded when the existing line is
        already at the live stock level.
        """
        product = self._products.get(product_id)
        if product is None:
            warning = f"Product {product_id} not found."
            logger.warning("add_item ignored: %s", warning)
            return warning

        stock = to_amount(product.get("stock"))
        line = self._line(product["id"])

        if line is not None:
            if line.quantity + 1 > stock:
                raise StockExceeded(
                    f"Not enough {product['name']} in stock!",
                    details={"product_id": product["id"], "stock": stock, "quantity": line.quantity},
                )
            line.quantity += 1
            return None

        if stock <= 0:
            warning = f"{product['name']} is out of stock!"
            logger.warning("add_item ignored: %s", warning)
            return warning

        self.lines.append(CartLineItem.from_product(product))
        return None

    def change_quantity(self, product_id, delta: int) -> None:
        if delta not in (1, -1):
            raise ValidationError("Quantity can only change by +1 or -1")

        line = self._line(product_id)
        if line is None:
            return

        if delta == 1:
            product = self._products.get(line.product_id)
            if product is None:
                return
            stock = to_amount(product.get("stock"))
            if line.quantity + 1 > stock:
                raise StockExceeded(
                    f"Cannot add more {product['name']}. Max stock reached.",
                    details={"product_id": line.product_id, "stock": stock, "quantity": line.quantity},
                )
            line.quantity += 1
            return

        line.quantity -= 1
        if line.quantity <= 0:
            self.lines.remove(line)

    def remove_item(self, product_id) -> None:
        self.lines = [line for line in self.lines if not _same_id(line.product_id, product_id)]

    def clear(self) -> None:
        self.lines = []
        self.customer_id = None
        self.customer_class = CUSTOMER_CLASS_RETAIL

    # ------------------------------------------------------------------
    # Customer selection
    # ------------------------------------------------------------------

    def select_customer(self, customer_id: int | None) -> None:
        self.customer_id = int(customer_id) if customer_id not in (None, "") else None

    def set_customer_class(self, customer_class: str) -> None:
        if customer_class not in VALID_CUSTOMER_CLASSES:
            raise ValidationError(
                f"Invalid customer class: {customer_class}. Must be one of {VALID_CUSTOMER_CLASSES}"
            )
        self.customer_class = customer_class

    @property
    def is_walk_in(self) -> bool:
        return self.customer_id is None

    # ------------------------------------------------------------------
    # Money
    # ------------------------------------------------------------------

    def subtotal(self, customer_class: str | None = None) -> int:
        cls = customer_class or self.customer_class
        return sum(unit_price(line, cls) * line.quantity for line in self.lines)

    def total(self, customer_class: str | None = None) -> int:
        # No discount or tax layer
        return self.subtotal(customer_class)

    def profit(self, customer_class: str | None = None) -> int:
        cls = customer_class or self.customer_class
        return sum(unit_margin(line, cls) * line.quantity for line in self.lines)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.lines

    def item_snapshot(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]

    def snapshot(self) -> dict:
        return {
            "items": self.item_snapshot(),
            "customer_id": self.customer_id,
            "customer_class": self.customer_class,
        }

    def restore(self, snapshot: dict) -> None:
        self.lines = [CartLineItem.from_dict(item) for item in snapshot.get("items") or []]
        self.customer_id = snapshot.get("customer_id")
        self.customer_class = snapshot.get("customer_class") or CUSTOMER_CLASS_RETAIL

    def _line(self, product_id) -> CartLineItem | None:
        for line in self.lines:
            if _same_id(line.product_id, product_id):
                return line
        return None


def _same_id(a, b) -> bool:
    return str(a) == str(b)
