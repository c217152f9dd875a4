# Overview: Flask API routes for text reports and report export.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_operator, current_store
from ..errors import PosError
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/<report_type>")
@require_operator
def render_report_route(report_type: str):
    """
    Render a report as plain text.

    Query params:
        date: YYYY-MM-DD (daily/monthly; defaults to today)
    """
    try:
        body = reporting_service.render_report(current_store(), report_type, request.args.get("date"))
        return current_app.response_class(body, mimetype="text/plain"), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to render report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.post("/<report_type>/export")
@require_operator
def export_report_route(report_type: str):
    """
    Write the report to REPORT_EXPORT_DIR as {type}_report_{date}.txt.

    Request body: {"date": "2026-10-18"}  (optional)
    """
    try:
        data = request.get_json(silent=True) or {}
        path = reporting_service.export_report(
            current_store(),
            report_type,
            current_app.config["REPORT_EXPORT_DIR"],
            target_date=data.get("date"),
        )
        return jsonify({
            "filename": path.name,
            "message": "Report exported.",
        }), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to export report")
        return jsonify({"error": "Internal server error"}), 500
