"""
Return Processing Service

WHY: A returned sale puts its goods back on the shelf and the money paid
back out is booked as a `refund` expense.

DESIGN PRINCIPLES:
- The original Sale row is never edited
- Stock is restored for every snapshotted line whose product still exists
- sales_count is NOT reduced and customer credit is NOT reversed; both
  asymmetries are kept as-is until the shop owner decides otherwise
- Stock restore and refund booking happen in one transaction
"""

from __future__ import annotations

import logging

from ..errors import InvalidReturnRequest, SaleNotFound
from ..money import to_amount
from tillbook.time_utils import utcnow
from .catalog_store import CatalogStore
from .concurrency import guarded_write
from .session_service import TerminalSession

logger = logging.getLogger(__name__)

REFUND_EXPENSE_TYPE = "refund"
NO_SUPPLIER = "N/A"


def refund_description(sale: dict, reason: str) -> str:
    return f"Refund for sale ID {sale['id']} ({sale.get('customer_name')}) - Reason: {reason}"


def process_return(session: TerminalSession, store: CatalogStore, sale_id, reason: str | None) -> dict:
    """
    Return a whole sale.

    Returns:
        The refund Expense record

    Raises:
        PrivilegeDenied: operator is not privileged
        InvalidReturnRequest: sale id or reason missing
        SaleNotFound: no such sale
    """
    session.require_privilege("process returns")

    if sale_id in (None, ""):
        raise InvalidReturnRequest("Please select a sale to return.")
    reason = (reason or "").strip()
    if not reason:
        raise InvalidReturnRequest("Please provide a reason for the return.")

    try:
        sale_id = int(sale_id)
    except (TypeError, ValueError):
        raise InvalidReturnRequest(f"Invalid sale id: {sale_id}") from None

    def _op():
        with store.atomic():
            sale = store.get("sales", sale_id)
            if sale is None:
                raise SaleNotFound("Sale not found.", details={"sale_id": sale_id})

            restocked = []
            for item in sale.get("items") or []:
                product = store.get("products", item.get("id"), for_update=True)
                if product is None:
                    continue
                quantity = to_amount(item.get("quantity"))
                store.update("products", product["id"], {
                    "stock": to_amount(product.get("stock")) + quantity,
                })
                restocked.append({"product_id": product["id"], "quantity": quantity})

            expense_id = store.create("expenses", {
                "created_at": utcnow(),
                "type": REFUND_EXPENSE_TYPE,
                "description": refund_description(sale, reason),
                "amount": to_amount(sale.get("total_amount")),
                "supplier": NO_SUPPLIER,
                "sale_id": sale["id"],
            })
            return store.get("expenses", expense_id), restocked

    expense, restocked = guarded_write(_op)
    logger.info(
        "Sale %s returned by %s: refund=%s restocked=%s",
        sale_id, session.operator_id, expense["amount"], restocked,
    )
    return expense
