from __future__ import annotations

from ..extensions import db
from tillbook.time_utils import to_utc_z


EXPENSE_TYPES = (
    "supplier_payment",
    "rent",
    "utilities",
    "transport",
    "supplies",
    "other",
    "refund",
)


class Sale(db.Model):
    """
    Append-only sales ledger entry.

    `items` is a JSON snapshot of the cart lines exactly as sold
    (id, name, quantity, purchase/bulk/individual price). A return never
    edits this row; it books a refund Expense instead.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    items = db.Column(db.JSON, nullable=False, default=list)

    # NULL customer_id means walk-in
    customer_id = db.Column(db.Integer, nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_class = db.Column(db.String(16), nullable=False, default="retail")

    total_amount = db.Column(db.Integer, nullable=False, default=0)
    profit = db.Column(db.Integer, nullable=False, default=0)

    payment_method = db.Column(db.String(16), nullable=False)
    cash_paid = db.Column(db.Integer, nullable=False, default=0)
    credit_paid = db.Column(db.Integer, nullable=False, default=0)
    mobile_paid = db.Column(db.Integer, nullable=False, default=0)
    change = db.Column(db.Integer, nullable=False, default=0)

    # "pos" for checkout, "manual" for back-office single-item sales
    source = db.Column(db.String(16), nullable=False, default="pos")
    operator_id = db.Column(db.String(128), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": to_utc_z(self.created_at),
            "items": list(self.items or []),
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "customer_class": self.customer_class,
            "total_amount": self.total_amount,
            "profit": self.profit,
            "payment_method": self.payment_method,
            "cash_paid": self.cash_paid,
            "credit_paid": self.credit_paid,
            "mobile_paid": self.mobile_paid,
            "change": self.change,
            "source": self.source,
            "operator_id": self.operator_id,
        }


class Expense(db.Model):
    """Money going out: supplier payments, running costs and refunds."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    type = db.Column(db.String(32), nullable=False, index=True)
    description = db.Column(db.String(512), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    supplier = db.Column(db.String(255), nullable=False, default="N/A")

    # Set for refunds so the originating sale can be traced
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": to_utc_z(self.created_at),
            "type": self.type,
            "description": self.description,
            "amount": self.amount,
            "supplier": self.supplier,
            "sale_id": self.sale_id,
        }
