# Overview: Flask API routes for dashboard counters.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth
from ..services.dashboard_service import dashboard_stats


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
def stats_route():
    return jsonify(dashboard_stats(g.current_user))
