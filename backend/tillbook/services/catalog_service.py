# Overview: Back-office maintenance of products, suppliers and customers.

"""
Catalog Service

WHY: The till only reads the catalog; an admin keeps it current. Every
write here goes through the store, so open terminals see the change on
their live product/customer feeds straight away.

DESIGN:
- Admin privilege is required for every write
- Products carry a supplier *name*, not a key; deleting a supplier does
  not touch products
- Deleting a product does not touch past sales (their lines are snapshots)
- Editing a customer may set their credit balance directly
"""

from __future__ import annotations

import logging

from ..errors import NotFound, ValidationError
from ..models import PRODUCT_CATEGORIES
from ..money import parse_amount
from .catalog_store import CatalogStore
from .concurrency import guarded_write
from .session_service import TerminalSession

logger = logging.getLogger(__name__)

PRODUCT_ERROR = (
    "Please fill in all product fields correctly, ensuring numbers are valid "
    "and stock is non-negative."
)

# Suppliers and customers share one record shape
CONTACT_COLLECTIONS = {
    "suppliers": "supplier",
    "customers": "customer",
}


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def _product_fields(data: dict) -> dict:
    name = _text(data.get("name"))
    category = _text(data.get("category")) or "snacks"
    supplier = _text(data.get("supplier"))
    purchase_price = parse_amount(data.get("purchase_price"))
    bulk_price = parse_amount(data.get("bulk_price"))
    individual_price = parse_amount(data.get("individual_price"))
    stock = parse_amount(data.get("stock"))

    prices = (purchase_price, bulk_price, individual_price)
    if (
        not name
        or not supplier
        or category not in PRODUCT_CATEGORIES
        or any(p is None or p < 0 for p in prices)
        or stock is None
        or stock < 0
    ):
        raise ValidationError(PRODUCT_ERROR, details={"allowed_categories": list(PRODUCT_CATEGORIES)})

    return {
        "name": name,
        "category": category,
        "supplier": supplier,
        "purchase_price": purchase_price,
        "bulk_price": bulk_price,
        "individual_price": individual_price,
        "stock": stock,
    }


def _contact_fields(collection: str, data: dict) -> dict:
    name = _text(data.get("name"))
    contact = _text(data.get("contact"))
    address = _text(data.get("address"))
    credit = parse_amount(data.get("credit"))
    if not name or not contact or not address or credit is None:
        raise ValidationError(f"Please fill in all {CONTACT_COLLECTIONS[collection]} fields correctly.")
    return {"name": name, "contact": contact, "address": address, "credit": credit}


def _require(store: CatalogStore, collection: str, record_id) -> dict:
    if record_id in (None, ""):
        raise ValidationError(f"No {collection[:-1]} selected.")
    record = store.get(collection, record_id)
    if record is None:
        raise NotFound(f"{collection[:-1].title()} {record_id} not found", details={"id": record_id})
    return record


# =============================================================================
# PRODUCTS
# =============================================================================

def add_product(session: TerminalSession, store: CatalogStore, data: dict) -> dict:
    session.require_privilege("add products")
    fields = _product_fields(data)
    fields["sales_count"] = 0

    def _op():
        product_id = store.create("products", fields)
        return store.get("products", product_id)

    product = guarded_write(_op)
    logger.info("Product %s (%s) added by %s", product["id"], product["name"], session.operator_id)
    return product


def update_product(session: TerminalSession, store: CatalogStore, product_id, data: dict) -> dict:
    """Replace a product's editable fields. sales_count is left alone."""
    session.require_privilege("edit products")
    _require(store, "products", product_id)
    fields = _product_fields(data)
    return guarded_write(lambda: store.update("products", product_id, fields))


def delete_product(session: TerminalSession, store: CatalogStore, product_id) -> None:
    session.require_privilege("delete products")
    _require(store, "products", product_id)
    guarded_write(lambda: store.delete("products", product_id))
    logger.info("Product %s deleted by %s", product_id, session.operator_id)


# =============================================================================
# SUPPLIERS & CUSTOMERS
# =============================================================================

def _check_collection(collection: str) -> str:
    if collection not in CONTACT_COLLECTIONS:
        raise ValidationError(f"Unknown collection: {collection}")
    return CONTACT_COLLECTIONS[collection]


def add_contact(session: TerminalSession, store: CatalogStore, collection: str, data: dict) -> dict:
    """Add a supplier or customer."""
    kind = _check_collection(collection)
    session.require_privilege(f"add {kind}s")
    fields = _contact_fields(collection, data)

    def _op():
        record_id = store.create(collection, fields)
        return store.get(collection, record_id)

    return guarded_write(_op)


def update_contact(session: TerminalSession, store: CatalogStore, collection: str, record_id, data: dict) -> dict:
    kind = _check_collection(collection)
    session.require_privilege(f"edit {kind}s")
    _require(store, collection, record_id)
    fields = _contact_fields(collection, data)
    return guarded_write(lambda: store.update(collection, record_id, fields))


def delete_contact(session: TerminalSession, store: CatalogStore, collection: str, record_id) -> None:
    kind = _check_collection(collection)
    session.require_privilege(f"delete {kind}s")
    _require(store, collection, record_id)
    guarded_write(lambda: store.delete(collection, record_id))
    logger.info("%s %s deleted by %s", kind.title(), record_id, session.operator_id)


def search_products(store: CatalogStore, term: str | None = None) -> list[dict]:
    """Products whose name or category contains `term` (case-insensitive)."""
    products = store.list_all("products")
    term = (term or "").strip().lower()
    if not term:
        return products
    return [
        p for p in products
        if term in (p["name"] or "").lower() or term in (p["category"] or "").lower()
    ]


def top_products(store: CatalogStore, limit: int = 8) -> list[dict]:
    """Best sellers by cumulative sales_count."""
    products = store.list_all("products")
    products.sort(key=lambda p: p["sales_count"] or 0, reverse=True)
    return products[:limit]
