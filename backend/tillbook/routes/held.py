# Overview: Flask API routes for held (parked) transactions.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_operator, current_store
from ..errors import PosError
from ..services import held_service


held_bp = Blueprint("held", __name__, url_prefix="/api/held")


@held_bp.post("/")
@require_operator
def hold_route():
    """Park the current cart for this operator."""
    try:
        held = held_service.hold(g.terminal, current_store())
        return jsonify({
            "held": held,
            "session": g.terminal.snapshot(),
            "message": "Transaction held successfully!",
        }), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to hold transaction")
        return jsonify({"error": "Error holding transaction."}), 500


@held_bp.get("/")
@require_operator
def list_held_route():
    try:
        return jsonify({"held": held_service.list_held(g.terminal, current_store())}), 200
    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list held transactions")
        return jsonify({"error": "Internal server error"}), 500


@held_bp.post("/<int:held_id>/resume")
@require_operator
def resume_route(held_id: int):
    """Replace the current cart with a held one."""
    try:
        held_service.resume(g.terminal, current_store(), held_id)
        return jsonify({
            "session": g.terminal.snapshot(),
            "message": "Transaction resumed.",
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to resume held transaction")
        return jsonify({"error": "Error resuming transaction."}), 500


@held_bp.delete("/<int:held_id>")
@require_operator
def discard_route(held_id: int):
    """
    Delete a held cart. Irreversible, so the caller must pass ?confirm=true.
    """
    try:
        if request.args.get("confirm", "").lower() != "true":
            return jsonify({
                "error": "Confirmation required to delete a held transaction",
                "code": "CONFIRMATION_REQUIRED",
            }), 400

        held_service.discard(g.terminal, current_store(), held_id)
        return jsonify({"message": "Held transaction deleted."}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete held transaction")
        return jsonify({"error": "Error deleting held transaction."}), 500
