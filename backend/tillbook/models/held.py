from __future__ import annotations

from ..extensions import db
from tillbook.time_utils import to_utc_z


class HeldCart(db.Model):
    """
    A parked cart, private to the operator who held it.

    Deleted when resumed or discarded.
    """
    __tablename__ = "held_carts"
    __table_args__ = (
        db.Index("ix_held_carts_owner_created", "owner_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    items = db.Column(db.JSON, nullable=False, default=list)
    customer_id = db.Column(db.Integer, nullable=True)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_class = db.Column(db.String(16), nullable=False, default="retail")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "created_at": to_utc_z(self.created_at),
            "items": list(self.items or []),
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "customer_class": self.customer_class,
        }
