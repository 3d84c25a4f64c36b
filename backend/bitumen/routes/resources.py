# Overview: Flask API routes for every registered CRUD resource; built from the resource registry.

"""
Resource Routes

make_resource_blueprint(name) builds list/get/create/update/delete routes
under /api/<name>. Permission checks happen inside EntityService, so a
denied request never reaches validation or the database.

List query parameters:
- include_inactive: include soft-deleted rows (default: false)
- search: free text over the resource's search fields
- <filter field>=<value>: equality filters (e.g. client_id, status)
- limit: 1..500 (default 100), offset: >= 0
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services.crud_service import ListFilters, service_for
from ..services.resources import RESOURCES


def make_resource_blueprint(name: str) -> Blueprint:
    service = service_for(name)
    bp = Blueprint(f"resource_{name.replace('-', '_')}", __name__, url_prefix=f"/api/{name}")

    @bp.get("")
    @require_auth
    def list_route():
        filters = ListFilters.from_args(service.spec, request.args)
        rows, total = service.list_page(g.current_user, filters)
        return jsonify({
            "items": [row.to_dict() for row in rows],
            "count": total,
            "limit": filters.limit,
            "offset": filters.offset,
        })

    @bp.post("")
    @require_auth
    def create_route():
        entity = service.create(g.current_user, request.get_json(silent=True))
        return jsonify(entity.to_dict()), 201

    @bp.get("/<int:entity_id>")
    @require_auth
    def get_route(entity_id: int):
        return jsonify(service.get(g.current_user, entity_id).to_dict())

    @bp.route("/<int:entity_id>", methods=["PUT", "PATCH"])
    @require_auth
    def update_route(entity_id: int):
        entity = service.update(g.current_user, entity_id, request.get_json(silent=True))
        return jsonify(entity.to_dict())

    @bp.delete("/<int:entity_id>")
    @require_auth
    def delete_route(entity_id: int):
        service.delete(g.current_user, entity_id)
        return jsonify({"message": f"{service.spec.label} deleted"})

    return bp


def resource_blueprints() -> list[Blueprint]:
    return [make_resource_blueprint(name) for name in RESOURCES]
