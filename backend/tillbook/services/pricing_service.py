# Overview: Price tier selection for retail and wholesale customers.

from __future__ import annotations

from typing import Any, Mapping

from ..money import to_amount

CUSTOMER_CLASS_RETAIL = "retail"
CUSTOMER_CLASS_WHOLESALE = "wholesale"

VALID_CUSTOMER_CLASSES = [
    CUSTOMER_CLASS_RETAIL,
    CUSTOMER_CLASS_WHOLESALE,
]


def _field(item: Any, name: str):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def unit_price(item: Any, customer_class: str) -> int:
    """
    Bulk price for wholesale customers, individual price otherwise.

    `item` may be a product record or a cart line snapshot; a missing price
    counts as 0.
    """
    if customer_class == CUSTOMER_CLASS_WHOLESALE:
        return to_amount(_field(item, "bulk_price"))
    return to_amount(_field(item, "individual_price"))


def unit_margin(item: Any, customer_class: str) -> int:
    return unit_price(item, customer_class) - to_amount(_field(item, "purchase_price"))
