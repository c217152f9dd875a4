# Overview: Flask API routes for the till: cart, customer, payment and checkout.

# backend/tillbook/routes/pos.py
"""
Point-of-Sale API Routes

Every route works on the calling operator's terminal session (g.terminal).
Responses that change the cart return the full session snapshot so the
screen never has to compute totals itself.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_operator, current_store, session_registry
from ..errors import PosError
from ..services import sales_service


pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")


def _session_payload(warning: str | None = None) -> dict:
    payload = {"session": g.terminal.snapshot()}
    if warning:
        payload["warning"] = warning
    return payload


@pos_bp.get("/session")
@require_operator
def get_session_route():
    return jsonify(_session_payload()), 200


@pos_bp.delete("/session")
@require_operator
def close_session_route():
    """
    Sign the terminal off. The open cart is discarded; held carts stay.
    """
    session_registry().close(g.operator_id)
    return jsonify({"message": "Terminal session closed."}), 200


# =============================================================================
# CART
# =============================================================================

@pos_bp.post("/cart/items")
@require_operator
def add_item_route():
    """
    Add one unit of a product.

    Request body: {"product_id": 12}

    Returns:
        200: session (with "warning" if the product is unknown or out of stock)
        409: STOCK_EXCEEDED
    """
    try:
        data = request.get_json() or {}
        product_id = data.get("product_id")
        if product_id is None:
            return jsonify({"error": "product_id required"}), 400

        warning = g.terminal.cart.add_item(product_id)
        return jsonify(_session_payload(warning)), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to add cart item")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.post("/cart/items/<int:product_id>/quantity")
@require_operator
def change_quantity_route(product_id: int):
    """
    Request body: {"delta": 1} or {"delta": -1}
    """
    try:
        data = request.get_json() or {}
        delta = data.get("delta")
        if delta is None:
            return jsonify({"error": "delta required"}), 400

        g.terminal.cart.change_quantity(product_id, delta)
        return jsonify(_session_payload()), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to change cart quantity")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.delete("/cart/items/<int:product_id>")
@require_operator
def remove_item_route(product_id: int):
    g.terminal.cart.remove_item(product_id)
    return jsonify(_session_payload()), 200


@pos_bp.post("/cart/clear")
@require_operator
def clear_cart_route():
    g.terminal.clear()
    return jsonify({**_session_payload(), "message": "Cart cleared."}), 200


# =============================================================================
# CUSTOMER & PAYMENT SELECTION
# =============================================================================

@pos_bp.put("/customer")
@require_operator
def select_customer_route():
    """
    Request body (both optional):
    {
        "customer_id": 3,           (null for walk-in)
        "customer_class": "wholesale"
    }
    """
    try:
        data = request.get_json() or {}
        if "customer_id" in data:
            g.terminal.select_customer(data.get("customer_id"))
        if "customer_class" in data:
            g.terminal.set_customer_class(data.get("customer_class"))
        return jsonify(_session_payload()), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to select customer")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.put("/payment")
@require_operator
def set_payment_route():
    """
    Request body (all optional):
    {
        "method": "split",
        "cash_received": 2000,
        "cash_amount": 500,
        "credit_amount": 500,
        "mobile_amount": 500
    }

    The response carries a live payment preview (change, remaining).
    """
    try:
        data = dict(request.get_json() or {})
        method = data.pop("method", None)
        if method is not None:
            g.terminal.set_payment_method(method)
        if data:
            g.terminal.set_payment_amounts(**data)
        return jsonify(_session_payload()), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to set payment")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# CHECKOUT
# =============================================================================

@pos_bp.post("/checkout")
@require_operator
def checkout_route():
    """
    Commit the cart.

    Returns:
        201: {"sale", "receipt", "settlement", "session"}
        400: EMPTY_CART, INSUFFICIENT_PAYMENT, NO_CREDIT_CUSTOMER
        409: CONCURRENT_STOCK_CHANGE
        503: STORE_UNAVAILABLE (cart kept, retry)
    """
    try:
        result = sales_service.checkout(
            g.terminal,
            current_store(),
            shop_name=current_app.config["SHOP_NAME"],
        )
        return jsonify({
            **result.to_dict(),
            **_session_payload(),
            "message": "Sale completed successfully!",
        }), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to complete sale")
        return jsonify({"error": "Error completing sale. Please try again."}), 500


@pos_bp.post("/manual-sales")
@require_operator
def manual_sale_route():
    """
    Record a single-product sale outside the cart (admin only).

    Request body:
    {
        "product_id": 12,
        "quantity": 4,
        "price_tier": "individual" | "bulk",
        "payment_method": "cash" | "credit",
        "customer_id": 3  (optional, required for credit)
    }
    """
    try:
        data = request.get_json() or {}
        sale = sales_service.record_manual_sale(
            g.terminal,
            current_store(),
            product_id=data.get("product_id"),
            quantity=data.get("quantity"),
            price_tier=data.get("price_tier", "individual"),
            payment_method=data.get("payment_method", "cash"),
            customer_id=data.get("customer_id"),
        )
        return jsonify({"sale": sale, "message": "Sale recorded successfully!"}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to record manual sale")
        return jsonify({"error": "Error recording sale. Please try again."}), 500


@pos_bp.get("/sales")
@require_operator
def list_sales_route():
    """Recent sales, newest first (for picking a sale to return)."""
    try:
        limit = request.args.get("limit", 50, type=int)
        sales = current_store().list_all("sales")
        sales.sort(key=lambda s: (s["created_at"] or "", s["id"]), reverse=True)
        return jsonify({"sales": sales[:limit]}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Internal server error"}), 500
