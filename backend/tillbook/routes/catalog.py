# Overview: Catalog listings for the till screen and admin catalog maintenance.

# backend/tillbook/routes/catalog.py
"""
Catalog API Routes

Reads are open to any operator. Writes need an admin (checked by the
catalog service). Deletes are irreversible, so the caller must pass
?confirm=true.
"""

from flask import Blueprint, jsonify, request, g, current_app

from ..decorators import require_operator, current_store
from ..errors import PosError
from ..services import catalog_service, reporting_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


def _confirmation_required(kind: str):
    return jsonify({
        "error": f"Confirmation required to delete a {kind}",
        "code": "CONFIRMATION_REQUIRED",
    }), 400


def _confirmed() -> bool:
    return request.args.get("confirm", "").lower() == "true"


# =============================================================================
# PRODUCTS
# =============================================================================

@catalog_bp.get("/products")
@require_operator
def list_products_route():
    """
    List products, optionally filtered by ?q= (name or category, case-insensitive).
    """
    try:
        products = catalog_service.search_products(current_store(), request.args.get("q"))
        return jsonify({"products": products}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get("/products/top")
@require_operator
def top_products_route():
    """Best sellers (quick-add buttons)."""
    try:
        limit = request.args.get("limit", 8, type=int)
        return jsonify({"products": catalog_service.top_products(current_store(), limit)}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list top products")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get("/products/low-stock")
@require_operator
def low_stock_route():
    try:
        threshold = request.args.get(
            "threshold", current_app.config["LOW_STOCK_THRESHOLD"], type=int
        )
        products = reporting_service.low_stock(current_store(), threshold)
        return jsonify({"threshold": threshold, "products": products}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list low-stock products")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.post("/products")
@require_operator
def add_product_route():
    """
    Request body:
    {
        "name": "Butter Cake",
        "category": "sweets",
        "supplier": "Golden Flour Co.",
        "purchase_price": 300,
        "bulk_price": 400,
        "individual_price": 500,
        "stock": 10
    }
    """
    try:
        product = catalog_service.add_product(g.terminal, current_store(), request.get_json() or {})
        return jsonify({"product": product, "message": "Product added successfully!"}), 201
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to add product")
        return jsonify({"error": "Error adding product."}), 500


@catalog_bp.put("/products/<int:product_id>")
@require_operator
def update_product_route(product_id: int):
    try:
        product = catalog_service.update_product(
            g.terminal, current_store(), product_id, request.get_json() or {}
        )
        return jsonify({"product": product, "message": "Product updated successfully!"}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Error updating product."}), 500


@catalog_bp.delete("/products/<int:product_id>")
@require_operator
def delete_product_route(product_id: int):
    try:
        if not _confirmed():
            return _confirmation_required("product")
        catalog_service.delete_product(g.terminal, current_store(), product_id)
        return jsonify({"message": "Product deleted successfully!"}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Error deleting product."}), 500


# =============================================================================
# SUPPLIERS & CUSTOMERS
# =============================================================================

@catalog_bp.get("/<any(suppliers, customers):collection>")
@require_operator
def list_contacts_route(collection: str):
    try:
        return jsonify({collection: current_store().list_all(collection)}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list %s", collection)
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.post("/<any(suppliers, customers):collection>")
@require_operator
def add_contact_route(collection: str):
    """
    Request body: {"name", "contact", "address", "credit"}
    """
    kind = catalog_service.CONTACT_COLLECTIONS[collection]
    try:
        record = catalog_service.add_contact(g.terminal, current_store(), collection, request.get_json() or {})
        return jsonify({kind: record, "message": f"{kind.title()} added successfully!"}), 201
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to add %s", kind)
        return jsonify({"error": f"Error adding {kind}."}), 500


@catalog_bp.put("/<any(suppliers, customers):collection>/<int:record_id>")
@require_operator
def update_contact_route(collection: str, record_id: int):
    kind = catalog_service.CONTACT_COLLECTIONS[collection]
    try:
        record = catalog_service.update_contact(
            g.terminal, current_store(), collection, record_id, request.get_json() or {}
        )
        return jsonify({kind: record, "message": f"{kind.title()} updated successfully!"}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to update %s", kind)
        return jsonify({"error": f"Error updating {kind}."}), 500


@catalog_bp.delete("/<any(suppliers, customers):collection>/<int:record_id>")
@require_operator
def delete_contact_route(collection: str, record_id: int):
    kind = catalog_service.CONTACT_COLLECTIONS[collection]
    try:
        if not _confirmed():
            return _confirmation_required(kind)
        catalog_service.delete_contact(g.terminal, current_store(), collection, record_id)
        return jsonify({"message": f"{kind.title()} deleted successfully!"}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete %s", kind)
        return jsonify({"error": f"Error deleting {kind}."}), 500
