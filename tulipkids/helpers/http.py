"""JSON response helpers shared by the app factory and the blueprints."""

from typing import Any, Dict

from flask import g, has_request_context, jsonify, request

# Paths that always answer in JSON, whatever the Accept header says.
JSON_PREFIXES = ("/admin/api/", "/payments/", "/send-volunteer-application")


def current_request_id() -> str:
    return g.get("request_id", "-") if has_request_context() else "-"


def wants_json() -> bool:
    if request.path.startswith(JSON_PREFIXES):
        return True
    accept = (request.headers.get("Accept") or "").lower()
    return "application/json" in accept or request.is_json


def json_ok(payload: Dict[str, Any], status: int = 200):
    payload.setdefault("ok", True)
    return jsonify(payload), status


def json_error(message: str, status: int, **extra: Any):
    """``{"ok": false, "error": {code, message, request_id}}`` plus any top-level ``extra`` keys."""
    body: Dict[str, Any] = {
        "ok": False,
        "error": {"code": int(status), "message": str(message), "request_id": current_request_id()},
    }
    body.update(extra)
    return jsonify(body), int(status)
