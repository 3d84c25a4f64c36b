# Overview: Flask API routes for user administration; accounts and per-module grants.

"""
User Management Routes

All routes require the USER_MANAGEMENT module:
- GET    /api/users                      VIEW
- POST   /api/users                      ADD
- GET    /api/users/<id>                 VIEW (includes grants)
- PUT    /api/users/<id>                 EDIT
- DELETE /api/users/<id>                 DELETE (deactivate)
- GET    /api/users/<id>/permissions     VIEW
- PUT    /api/users/<id>/permissions     EDIT (replace all grants)
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services import user_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
def list_users_route():
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    users = user_service.list_users(g.current_user, include_inactive=include_inactive)
    return jsonify({"items": [u.to_dict() for u in users], "count": len(users)})


@users_bp.post("")
@require_auth
def create_user_route():
    user = user_service.admin_create_user(g.current_user, request.get_json(silent=True))
    return jsonify(user.to_dict()), 201


@users_bp.get("/<int:user_id>")
@require_auth
def get_user_route(user_id: int):
    user = user_service.get_user(g.current_user, user_id)
    grants = user_service.get_user_grants(g.current_user, user_id)
    return jsonify(dict(user.to_dict(), permissions=grants))


@users_bp.put("/<int:user_id>")
@require_auth
def update_user_route(user_id: int):
    user = user_service.update_user(g.current_user, user_id, request.get_json(silent=True))
    return jsonify(user.to_dict())


@users_bp.delete("/<int:user_id>")
@require_auth
def deactivate_user_route(user_id: int):
    user = user_service.deactivate_user(g.current_user, user_id)
    return jsonify({"user": user.to_dict(), "message": "User deactivated"})


@users_bp.get("/<int:user_id>/permissions")
@require_auth
def get_user_permissions_route(user_id: int):
    return jsonify({"permissions": user_service.get_user_grants(g.current_user, user_id)})


@users_bp.put("/<int:user_id>/permissions")
@require_auth
def replace_user_permissions_route(user_id: int):
    """Body: {"permissions": [{"module": "...", "action": "...", "granted": true}, ...]}"""
    grants = user_service.replace_user_grants(g.current_user, user_id, request.get_json(silent=True))
    return jsonify({"permissions": grants})
