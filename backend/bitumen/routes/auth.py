# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

The session token travels in an HTTP-only `sessionToken` cookie (7 days,
SameSite=Lax). The login response also returns it so non-browser clients
can send it as a Bearer token.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import get_request_token, require_auth
from ..extensions import db
from ..permissions import MENU, filter_menu
from ..services import auth_service, permission_service, session_service
from ..services.auth_service import AuthenticationError
from ..validation import ConflictError, ValidationError, json_object


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _set_session_cookie(response, token: str):
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=current_app.config["SESSION_DURATION_DAYS"] * 24 * 60 * 60,
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


@auth_bp.post("/register")
def register_route():
    """
    Self-registration.

    Body: username, password, confirm_password?, first_name, last_name,
    email, role? (any role except ADMIN; default SALES_EXECUTIVE),
    employee_code?, mobile_number?, designation?, department?
    """
    try:
        user = auth_service.register(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info("Registered user %s (%s)", user.username, user.role)
    return jsonify({"user": user.to_dict(), "message": "Registration successful"}), 201


@auth_bp.post("/login")
def login_route():
    """Authenticate, open a session and set the session cookie."""
    try:
        data = json_object(request.get_json(silent=True))
        username = (data.get("username") or data.get("email") or "").strip()
        password = data.get("password") or ""

        if not username or not password:
            return jsonify({"error": "username and password required"}), 400

        user, token = session_service.login(
            username,
            password,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except AuthenticationError:
        return jsonify({"error": "Invalid credentials"}), 401
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    response = jsonify({
        "user": user.to_dict(),
        "token": token,
        "message": "Login successful",
    })
    return _set_session_cookie(response, token)


@auth_bp.post("/logout")
def logout_route():
    """Delete the presented session and clear the cookie. Always 200."""
    try:
        session_service.logout(get_request_token())
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    response = jsonify({"message": "Logout successful"})
    response.delete_cookie(current_app.config["AUTH_COOKIE_NAME"])
    return response


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()})


@auth_bp.get("/permissions")
@require_auth
def permissions_route():
    """Grant list of the current user; admins get the full matrix."""
    return jsonify({
        "is_admin": g.current_user.is_admin,
        "permissions": permission_service.list_grants(g.current_user),
    })


@auth_bp.get("/navigation")
@require_auth
def navigation_route():
    """Sidebar menu pruned to what the current user may view."""
    return jsonify(filter_menu(MENU, g.current_user).to_dict())
