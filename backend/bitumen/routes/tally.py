# Overview: Flask API routes for the desktop accounting agent; heartbeat, status and record relay.

"""
Accounting Agent Routes

Agent-facing (X-Sync-Key header when SYNC_AGENT_KEY is configured):
- POST /api/tally/heartbeat          {"clientId"?: str, "isReal"?: bool}
- POST /api/tally/sync/clients       [client records]
- POST /api/tally/sync/payments      [payment records]
- POST /api/tally/sync/orders        [order records]

User-facing (session required):
- GET  /api/tally/sync/status
- GET  /api/tally/clients            known agents with last-seen times

Relay endpoints answer 503 while no real agent is connected.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_sync_key
from ..services import sync_service
from ..services.sync_registry import DEFAULT_CLIENT_ID, get_registry
from ..validation import json_object


tally_bp = Blueprint("tally", __name__, url_prefix="/api/tally")


@tally_bp.post("/heartbeat")
@require_sync_key
def heartbeat_route():
    data = json_object(request.get_json(silent=True))
    client_id = str(data.get("clientId") or data.get("client_id") or DEFAULT_CLIENT_ID)
    is_real = data.get("isReal", data.get("is_real", True))
    if not isinstance(is_real, bool):
        return jsonify({"error": "Validation failed", "fields": {"isReal": "must be a boolean"}}), 400

    entry = get_registry().heartbeat(client_id, is_real=is_real)
    return jsonify({"success": True, "heartbeat": entry.to_dict()})


@tally_bp.get("/sync/status")
@require_auth
def sync_status_route():
    return jsonify(get_registry().status())


@tally_bp.get("/clients")
@require_auth
def agents_route():
    registry = get_registry()
    status = registry.status()
    return jsonify({"items": status["clients"], "count": len(status["clients"])})


def _relay(kind: str):
    results = sync_service.relay(kind, request.get_json(silent=True), get_registry())
    return jsonify({
        "success": all(r.action != "error" for r in results),
        "results": [r.to_dict() for r in results],
        "created": sum(1 for r in results if r.action == "created"),
        "updated": sum(1 for r in results if r.action == "updated"),
        "errors": sum(1 for r in results if r.action == "error"),
    })


@tally_bp.post("/sync/clients")
@require_sync_key
def sync_clients_route():
    return _relay("clients")


@tally_bp.post("/sync/payments")
@require_sync_key
def sync_payments_route():
    return _relay("payments")


@tally_bp.post("/sync/orders")
@require_sync_key
def sync_orders_route():
    return _relay("orders")
