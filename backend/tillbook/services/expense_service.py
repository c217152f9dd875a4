# Overview: The expense book: running costs, supplier payments, refunds.

from __future__ import annotations

from ..errors import NotFound, ValidationError
from ..models import EXPENSE_TYPES
from ..money import to_amount
from tillbook.time_utils import utcnow
from .catalog_store import CatalogStore
from .concurrency import guarded_write
from .session_service import TerminalSession

# Refunds are only booked by the returns processor
MANUAL_EXPENSE_TYPES = [t for t in EXPENSE_TYPES if t != "refund"]


def list_expenses(store: CatalogStore) -> list[dict]:
    expenses = store.list_all("expenses")
    return sorted(expenses, key=lambda e: (e["created_at"] or "", e["id"]), reverse=True)


def add_expense(
    session: TerminalSession,
    store: CatalogStore,
    expense_type: str,
    description: str,
    amount,
    supplier: str | None = None,
) -> dict:
    session.require_privilege("add expenses")

    description = (description or "").strip()
    value = to_amount(amount)
    if expense_type not in MANUAL_EXPENSE_TYPES or not description or value <= 0:
        raise ValidationError(
            "Please fill in all expense fields correctly, ensuring amount is positive.",
            details={"allowed_types": MANUAL_EXPENSE_TYPES},
        )

    def _op():
        expense_id = store.create("expenses", {
            "created_at": utcnow(),
            "type": expense_type,
            "description": description,
            "amount": value,
            "supplier": (supplier or "").strip() or "N/A",
        })
        return store.get("expenses", expense_id)

    return guarded_write(_op)


def delete_expense(session: TerminalSession, store: CatalogStore, expense_id: int) -> None:
    session.require_privilege("delete expenses")
    if store.get("expenses", expense_id) is None:
        raise NotFound(f"Expense {expense_id} not found", details={"expense_id": expense_id})
    guarded_write(lambda: store.delete("expenses", expense_id))
