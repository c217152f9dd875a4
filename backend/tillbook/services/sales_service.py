"""
Sales Service - committing carts to stock, customer credit and the ledger

WHY: A checkout touches several records (every product in the cart, maybe a
customer, the sales ledger). They are written in one store transaction so a
failure part-way leaves nothing behind, and the in-memory cart is only
cleared after the commit succeeds, so the operator can simply retry.

Stock is re-read and re-checked inside the transaction. Cart-time prices
and quantities are for display and the receipt, not for authorisation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import (
    ConcurrentStockChange,
    EmptyCart,
    NoCreditCustomer,
    NotFound,
    StockExceeded,
    ValidationError,
)
from ..money import to_amount
from tillbook.time_utils import utcnow
from .cart_service import CartLineItem
from .catalog_store import CatalogStore
from .concurrency import guarded_write
from .payment_service import METHOD_CASH, METHOD_CREDIT, Settlement, reconcile
from .pricing_service import (
    CUSTOMER_CLASS_RETAIL,
    CUSTOMER_CLASS_WHOLESALE,
    unit_price,
    unit_margin,
)
from .receipt_service import render_receipt
from .session_service import TerminalSession, WALK_IN_NAME, UNKNOWN_CUSTOMER_NAME

logger = logging.getLogger(__name__)

SOURCE_POS = "pos"
SOURCE_MANUAL = "manual"

PRICE_TIERS = {
    "individual": CUSTOMER_CLASS_RETAIL,
    "bulk": CUSTOMER_CLASS_WHOLESALE,
}

MANUAL_PAYMENT_METHODS = [METHOD_CASH, METHOD_CREDIT]


@dataclass
class CheckoutResult:
    sale: dict
    receipt: str
    settlement: Settlement

    def to_dict(self) -> dict:
        return {
            "sale": self.sale,
            "receipt": self.receipt,
            "settlement": self.settlement.to_dict(),
        }


def _take_stock(store: CatalogStore, items: list[dict]) -> None:
    """Decrement stock and bump sales_count for every line, or fail the lot."""
    for item in items:
        product = store.get("products", item["id"], for_update=True)
        if product is None:
            raise ConcurrentStockChange(
                f"{item['name']} is no longer in the catalog.",
                details={"product_id": item["id"]},
            )

        stock = to_amount(product.get("stock"))
        quantity = item["quantity"]
        if stock < quantity:
            raise ConcurrentStockChange(
                f"Only {stock} {product['name']} left in stock.",
                details={"product_id": item["id"], "stock": stock, "requested_quantity": quantity},
            )

        store.update("products", item["id"], {
            "stock": stock - quantity,
            "sales_count": to_amount(product.get("sales_count")) + quantity,
        })


def _charge_customer(store: CatalogStore, customer_id: int | None, credit_amount: int) -> str:
    """Add `credit_amount` to what the customer owes. Returns the customer's name."""
    if customer_id is None:
        return WALK_IN_NAME

    customer = store.get("customers", customer_id, for_update=True)
    if customer is None:
        if credit_amount > 0:
            raise NotFound(f"Customer {customer_id} not found", details={"customer_id": customer_id})
        return UNKNOWN_CUSTOMER_NAME

    if credit_amount > 0:
        store.update("customers", customer_id, {
            "credit": to_amount(customer.get("credit")) + credit_amount,
        })
    return customer["name"]


def checkout(session: TerminalSession, store: CatalogStore, shop_name: str = "Family Cake") -> CheckoutResult:
    """
    Commit the session's cart.

    Raises:
        EmptyCart: nothing to sell (also stops a double commit)
        InsufficientPayment / NoCreditCustomer: payment rejected
        ConcurrentStockChange: a product vanished or ran short since it was added
        StoreUnavailable: the store failed; nothing was written
    """
    cart = session.cart
    if cart.is_empty():
        raise EmptyCart("Cart is empty!")

    total = cart.total()
    profit = cart.profit()
    settlement = reconcile(total, session.payment, customer_id=cart.customer_id)
    items = cart.item_snapshot()
    customer_id = cart.customer_id
    customer_class = cart.customer_class

    def _op():
        with store.atomic():
            _take_stock(store, items)
            customer_name = _charge_customer(store, customer_id, settlement.credit_paid)
            sale_id = store.create("sales", {
                "created_at": utcnow(),
                "items": items,
                "customer_id": customer_id,
                "customer_name": customer_name,
                "customer_class": customer_class,
                "total_amount": total,
                "profit": profit,
                "payment_method": settlement.method,
                "cash_paid": settlement.cash_paid,
                "credit_paid": settlement.credit_paid,
                "mobile_paid": settlement.mobile_paid,
                "change": settlement.change,
                "source": SOURCE_POS,
                "operator_id": session.operator_id,
            })
            return store.get("sales", sale_id)

    sale = guarded_write(_op)
    receipt = render_receipt(sale, shop_name=shop_name)
    session.clear()

    logger.info(
        "Sale %s committed by %s: total=%s method=%s lines=%d",
        sale["id"], session.operator_id, total, settlement.method, len(items),
    )
    return CheckoutResult(sale=sale, receipt=receipt, settlement=settlement)


def record_manual_sale(
    session: TerminalSession,
    store: CatalogStore,
    product_id: int,
    quantity,
    price_tier: str = "individual",
    payment_method: str = METHOD_CASH,
    customer_id: int | None = None,
) -> dict:
    """
    Back-office single-product sale that bypasses the cart.

    Paid in full through one channel; credit sales are added to the
    customer's balance.
    """
    session.require_privilege("record sales")

    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        quantity = 0
    if not product_id or quantity <= 0:
        raise ValidationError("Please select a product and enter a valid quantity for manual sale.")

    customer_class = PRICE_TIERS.get(price_tier)
    if customer_class is None:
        raise ValidationError(f"Invalid price tier: {price_tier}. Must be one of {list(PRICE_TIERS)}")
    if payment_method not in MANUAL_PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method: {payment_method}. Must be one of {MANUAL_PAYMENT_METHODS}"
        )
    if payment_method == METHOD_CREDIT and customer_id in (None, ""):
        raise NoCreditCustomer(
            "Cannot process credit payment for walk-in customer. Please select a customer."
        )
    customer_id = int(customer_id) if customer_id not in (None, "") else None

    def _op():
        with store.atomic():
            product = store.get("products", product_id, for_update=True)
            if product is None:
                raise NotFound("Selected product not found for manual sale.")

            stock = to_amount(product.get("stock"))
            if stock < quantity:
                raise StockExceeded(
                    f"Not enough stock for {product['name']}. Available: {stock}",
                    details={"product_id": product["id"], "stock": stock, "requested_quantity": quantity},
                )

            total = unit_price(product, customer_class) * quantity
            profit = unit_margin(product, customer_class) * quantity

            store.update("products", product["id"], {
                "stock": stock - quantity,
                "sales_count": to_amount(product.get("sales_count")) + quantity,
            })

            credit_amount = total if payment_method == METHOD_CREDIT else 0
            if customer_id is not None and store.get("customers", customer_id) is None:
                raise NotFound(f"Customer {customer_id} not found", details={"customer_id": customer_id})
            customer_name = _charge_customer(store, customer_id, credit_amount)

            line = CartLineItem.from_product(product)
            line.quantity = quantity

            sale_id = store.create("sales", {
                "created_at": utcnow(),
                "items": [line.to_dict()],
                "customer_id": customer_id,
                "customer_name": customer_name,
                "customer_class": customer_class,
                "total_amount": total,
                "profit": profit,
                "payment_method": payment_method,
                "cash_paid": total if payment_method == METHOD_CASH else 0,
                "credit_paid": credit_amount,
                "mobile_paid": 0,
                "change": 0,
                "source": SOURCE_MANUAL,
                "operator_id": session.operator_id,
            })
            return store.get("sales", sale_id)

    sale = guarded_write(_op)
    logger.info("Manual sale %s recorded by %s: total=%s", sale["id"], session.operator_id, sale["total_amount"])
    return sale
