from __future__ import annotations

from ..extensions import db
from tillbook.time_utils import to_utc_z


PRODUCT_CATEGORIES = ("snacks", "sweets", "beverages", "other")


class Product(db.Model):
    """
    Sellable catalog item.

    Prices are whole MMK. `stock` only moves through committed sales
    (down) and returns (up); the check constraint is the last line of
    defence against a negative count.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        db.CheckConstraint("sales_count >= 0", name="ck_products_sales_count_nonnegative"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(32), nullable=False, default="other")

    # Supplier is referenced by name, not by key
    supplier = db.Column(db.String(255), nullable=True)

    purchase_price = db.Column(db.Integer, nullable=False, default=0)
    bulk_price = db.Column(db.Integer, nullable=False, default=0)
    individual_price = db.Column(db.Integer, nullable=False, default=0)

    stock = db.Column(db.Integer, nullable=False, default=0)
    sales_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "supplier": self.supplier,
            "purchase_price": self.purchase_price,
            "bulk_price": self.bulk_price,
            "individual_price": self.individual_price,
            "stock": self.stock,
            "sales_count": self.sales_count,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class Supplier(db.Model):
    """Supplier master data, maintained by admins. Products refer to it by name."""
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact = db.Column(db.String(128), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    credit = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "address": self.address,
            "credit": self.credit,
            "created_at": to_utc_z(self.created_at),
        }


class Customer(db.Model):
    """
    Customer master data.

    `credit` is the amount the customer owes the shop. Credit-paid sales
    raise it; only an admin edit lowers it.
    """
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact = db.Column(db.String(128), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    credit = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "address": self.address,
            "credit": self.credit,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }
