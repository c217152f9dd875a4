# backend/tillbook/routes/system.py
"""
Liveness and build info for the till backend. Both endpoints are public.
"""

import os
import sys
import time
from flask import Blueprint, current_app
from sqlalchemy import func, select

from ..extensions import db
from ..decorators import session_registry
from ..models import Product, Sale
from tillbook.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def _catalog_check() -> dict:
    started = time.perf_counter()
    try:
        products = db.session.scalar(select(func.count(Product.id)))
        sales = db.session.scalar(select(func.count(Sale.id)))
    except Exception:
        current_app.logger.exception("Catalog store check failed")
        return {"status": "unhealthy", "error": "Database error"}
    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "products": products,
        "sales": sales,
    }


def _export_dir_check() -> dict:
    # Missing is fine, the first export creates it
    path = current_app.config["REPORT_EXPORT_DIR"]
    if os.path.isdir(path) and not os.access(path, os.W_OK):
        return {"status": "degraded", "warning": "Report directory is not writable"}
    return {"status": "healthy"}


@system_bp.get("/health")
def health():
    """
    200 while the catalog store answers (a read-only report directory only
    degrades), 503 otherwise.
    """
    checks = {"catalog_store": _catalog_check(), "report_exports": _export_dir_check()}
    states = {check["status"] for check in checks.values()}

    if "unhealthy" in states:
        overall, code = "unhealthy", 503
    elif "degraded" in states:
        overall, code = "degraded", 200
    else:
        overall, code = "healthy", 200

    return {
        "status": overall,
        "timestamp": to_utc_z(utcnow()),
        "checks": checks,
        "open_terminals": len(session_registry()),
    }, code


@system_bp.get("/version")
def version():
    return {
        "api_version": API_VERSION,
        "environment": "development" if current_app.debug else "production",
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
