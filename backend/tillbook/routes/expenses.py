# Overview: Flask API routes for the expense book.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_operator, current_store
from ..errors import PosError
from ..services import expense_service


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("/")
@require_operator
def list_expenses_route():
    try:
        return jsonify({"expenses": expense_service.list_expenses(current_store())}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list expenses")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.post("/")
@require_operator
def add_expense_route():
    """
    Request body:
    {
        "type": "rent",
        "description": "October rent",
        "amount": 150000,
        "supplier": "Golden Flour Co."  (optional)
    }
    """
    try:
        data = request.get_json() or {}
        expense = expense_service.add_expense(
            g.terminal,
            current_store(),
            expense_type=data.get("type"),
            description=data.get("description"),
            amount=data.get("amount"),
            supplier=data.get("supplier"),
        )
        return jsonify({"expense": expense, "message": "Expense added successfully!"}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to add expense")
        return jsonify({"error": "Error adding expense."}), 500


@expenses_bp.delete("/<int:expense_id>")
@require_operator
def delete_expense_route(expense_id: int):
    try:
        expense_service.delete_expense(g.terminal, current_store(), expense_id)
        return jsonify({"message": "Expense deleted successfully!"}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete expense")
        return jsonify({"error": "Error deleting expense."}), 500
