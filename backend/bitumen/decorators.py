# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .services import session_service


def get_request_token() -> str | None:
    """Session token from a Bearer header, else from the sessionToken cookie."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(current_app.config["AUTH_COOKIE_NAME"]) or None


def require_auth(f):
    """
    Require a valid session.

    Sets g.current_user and g.session_token. Returns 401 when the token is
    missing, unknown, expired or belongs to a deactivated user.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_request_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        user = session_service.resolve_session(token)
        if user is None:
            return jsonify({"error": "Authentication required"}), 401

        g.current_user = user
        g.session_token = token
        return f(*args, **kwargs)

    return decorated_function


def require_sync_key(f):
    """When SYNC_AGENT_KEY is configured, require it in the X-Sync-Key header."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("SYNC_AGENT_KEY")
        if expected and request.headers.get("X-Sync-Key") != expected:
            current_app.logger.warning("Rejected sync call from %s: bad agent key", request.remote_addr)
            return jsonify({"error": "Authentication required"}), 401
        return f(*args, **kwargs)

    return decorated_function
