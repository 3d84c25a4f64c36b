# Overview: Service-layer operations for user administration; gated by USER_MANAGEMENT.

"""
User Administration

Administrators (or anyone granted USER_MANAGEMENT) manage accounts and
their module grants. Unlike self-registration, this path may create
ADMIN users, but only an administrator may create, promote or edit one.
Deactivation is a soft delete and also signs the user out everywhere.
"""

from __future__ import annotations

from ..extensions import db
from ..models import User
from ..permissions import DEFAULT_ROLE_GRANTS, Action, Module, Role, parse_role
from ..validation import ConflictError, NotFoundError, ValidationError, json_object, require_fields
from . import permission_service
from .auth_service import PasswordValidationError, ensure_unique_identity, create_user, hash_password
from .permission_service import PermissionDeniedError, require_permission
from .session_service import revoke_user_sessions


UPDATABLE_FIELDS = (
    "first_name", "last_name", "email", "role", "designation",
    "department", "mobile_number", "employee_code", "is_active", "password",
)


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    return user


def list_users(actor: User, include_inactive: bool = False) -> list[User]:
    require_permission(actor, Module.USER_MANAGEMENT, Action.VIEW)
    query = db.session.query(User)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.username).all()


def get_user(actor: User, user_id: int) -> User:
    require_permission(actor, Module.USER_MANAGEMENT, Action.VIEW)
    return _get_user_or_404(user_id)


def admin_create_user(actor: User, payload: dict) -> User:
    """
    Create any kind of user, ADMIN included.
    Only administrators may create another ADMIN.

    payload.apply_role_defaults=true seeds the role's DEFAULT_ROLE_GRANTS.
    """
    require_permission(actor, Module.USER_MANAGEMENT, Action.ADD)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", {"_": "expected a JSON object"})

    errors = require_fields(payload, ("username", "email", "password", "first_name", "last_name"))
    role = None
    try:
        role = parse_role(payload.get("role") or "SALES_EXECUTIVE")
    except ValueError as exc:
        errors["role"] = str(exc)
    if errors:
        raise ValidationError("Validation failed", errors)
    if role == Role.ADMIN and not actor.is_admin:
        raise PermissionDeniedError(Module.USER_MANAGEMENT, Action.ADD)

    try:
        user = create_user(
            username=payload["username"].strip(),
            email=payload["email"].strip(),
            password=payload["password"],
            first_name=payload["first_name"].strip(),
            last_name=payload["last_name"].strip(),
            role=role,
            employee_code=payload.get("employee_code"),
            mobile_number=payload.get("mobile_number"),
            designation=payload.get("designation"),
            department=payload.get("department"),
        )
    except PasswordValidationError as exc:
        raise ValidationError("Validation failed", {"password": str(exc)}) from exc

    if payload.get("apply_role_defaults") and role in DEFAULT_ROLE_GRANTS:
        permission_service.set_grants(user, [
            {"module": module.value, "action": action.value, "granted": True}
            for module, actions in DEFAULT_ROLE_GRANTS[role].items()
            for action in actions
        ])
    return user


def update_user(actor: User, user_id: int, payload: dict) -> User:
    require_permission(actor, Module.USER_MANAGEMENT, Action.EDIT)
    user = _get_user_or_404(user_id)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", {"_": "expected a JSON object"})

    errors = {k: "field not allowed" for k in payload if k not in UPDATABLE_FIELDS}
    changes: dict = {}

    for key in ("first_name", "last_name", "email"):
        if key in payload:
            value = (payload[key] or "").strip()
            if not value:
                errors[key] = "cannot be blank"
            else:
                changes[key] = value

    for key in ("designation", "department", "mobile_number", "employee_code"):
        if key in payload:
            changes[key] = str(payload[key] or "").strip() or None

    if "role" in payload:
        try:
            changes["role"] = parse_role(payload["role"]).value
        except ValueError as exc:
            errors["role"] = str(exc)

    if "is_active" in payload:
        if not isinstance(payload["is_active"], bool):
            errors["is_active"] = "must be a boolean"
        else:
            changes["is_active"] = payload["is_active"]

    if "password" in payload:
        try:
            changes["password_hash"] = hash_password(payload["password"] or "")
        except PasswordValidationError as exc:
            errors["password"] = str(exc)

    if errors:
        raise ValidationError("Validation failed", errors)

    if (user.is_admin or changes.get("role") == Role.ADMIN.value) and not actor.is_admin:
        raise PermissionDeniedError(Module.USER_MANAGEMENT, Action.EDIT)
    if user.id == actor.id and changes.get("is_active") is False:
        raise ConflictError("You cannot deactivate your own account")

    if changes.get("employee_code") or ("email" in changes and changes["email"] != user.email):
        ensure_unique_identity(
            user.username,
            changes.get("email", user.email),
            exclude_user_id=user.id,
            employee_code=changes.get("employee_code"),
        )

    for key, value in changes.items():
        setattr(user, key, value)
    db.session.commit()

    if changes.get("is_active") is False:
        revoke_user_sessions(user.id)
    return user


def deactivate_user(actor: User, user_id: int) -> User:
    require_permission(actor, Module.USER_MANAGEMENT, Action.DELETE)
    user = _get_user_or_404(user_id)
    if user.is_admin and not actor.is_admin:
        raise PermissionDeniedError(Module.USER_MANAGEMENT, Action.DELETE)
    if user.id == actor.id:
        raise ConflictError("You cannot deactivate your own account")
    user.is_active = False
    db.session.commit()
    revoke_user_sessions(user.id)
    return user


def get_user_grants(actor: User, user_id: int) -> list[dict]:
    require_permission(actor, Module.USER_MANAGEMENT, Action.VIEW)
    return permission_service.list_grants(_get_user_or_404(user_id))


def replace_user_grants(actor: User, user_id: int, payload) -> list[dict]:
    """payload is the request body: {"permissions": [...]}."""
    require_permission(actor, Module.USER_MANAGEMENT, Action.EDIT)
    user = _get_user_or_404(user_id)
    return permission_service.set_grants(user, json_object(payload).get("permissions"))
