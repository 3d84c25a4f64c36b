# Overview: Maps service exceptions to JSON error responses.

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db
from .services.auth_service import AuthenticationError
from .services.permission_service import PermissionDeniedError
from .services.sync_service import SyncUnavailableError
from .validation import ConflictError, NotFoundError, ValidationError


def register_error_handlers(app) -> None:
    @app.errorhandler(AuthenticationError)
    def handle_authentication(e):
        return jsonify({"error": e.message}), 401

    @app.errorhandler(PermissionDeniedError)
    def handle_permission_denied(e):
        return jsonify({
            "error": "Permission denied",
            "module": e.module.value,
            "action": e.action.value,
        }), 403

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        db.session.rollback()
        return jsonify(e.to_dict()), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ConflictError)
    def handle_conflict(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(SyncUnavailableError)
    def handle_sync_unavailable(e):
        return jsonify({"error": str(e)}), 503

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
