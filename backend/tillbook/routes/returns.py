# Overview: Flask API route for sale returns.

# backend/tillbook/routes/returns.py
"""
Return Processing API Route

SECURITY:
- Privileged operators only (checked by the returns service)
- Whole-sale returns only; the sale row itself is never modified
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_operator, current_store
from ..errors import PosError
from ..money import format_mmk
from ..services import return_service


returns_bp = Blueprint("returns", __name__, url_prefix="/api/returns")


@returns_bp.post("/")
@require_operator
def process_return_route():
    """
    Request body:
    {
        "sale_id": 42,
        "reason": "damaged"
    }

    Returns:
        201: {"expense": refund expense}
        400: INVALID_RETURN_REQUEST
        403: PRIVILEGE_DENIED
        404: SALE_NOT_FOUND
    """
    try:
        data = request.get_json() or {}
        sale_id = data.get("sale_id")

        expense = return_service.process_return(
            g.terminal,
            current_store(),
            sale_id=sale_id,
            reason=data.get("reason"),
        )
        return jsonify({
            "expense": expense,
            "message": (
                f"Sale ID {sale_id} successfully processed for return. "
                f"Amount {format_mmk(expense['amount'])} recorded as an expense."
            ),
        }), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to process return")
        return jsonify({"error": "Error processing return."}), 500
