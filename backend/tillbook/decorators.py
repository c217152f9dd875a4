# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app


TRUTHY = {"1", "true", "yes", "on"}


def current_store():
    """The app-wide catalog store."""
    return current_app.extensions["tillbook"]["store"]


def session_registry():
    return current_app.extensions["tillbook"]["sessions"]


def require_operator(f):
    """
    Require an operator identity and attach their terminal session.

    Authentication happens upstream; the gateway forwards the result as:
    - X-Operator-Id: the operator's user id (required)
    - X-Operator-Privileged: "true" for admins

    Sets:
    - g.operator_id
    - g.is_privileged
    - g.terminal: the operator's TerminalSession
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        operator_id = (request.headers.get("X-Operator-Id") or "").strip()
        if not operator_id:
            return jsonify({"error": "Authentication required", "code": "AUTH_REQUIRED"}), 401

        is_privileged = (request.headers.get("X-Operator-Privileged") or "").strip().lower() in TRUTHY

        g.operator_id = operator_id
        g.is_privileged = is_privileged
        g.terminal = session_registry().get_or_create(operator_id, is_privileged)

        return f(*args, **kwargs)

    return decorated_function
