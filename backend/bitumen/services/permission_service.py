# Overview: Service-layer operations for permission; per-user module/action grants.

"""
Permission Checking

Grants are (module, action, granted) rows per user. Administrators pass
every check without consulting the table. Everyone else is denied unless a
row with granted=True exists. Checks hit the database every time so a
change made by an administrator applies to the very next request.
"""

from __future__ import annotations

from typing import Iterable

from flask import current_app

from ..extensions import db
from ..models import User, UserPermission
from ..permissions import Action, Module, parse_action, parse_module
from ..validation import ValidationError


class PermissionDeniedError(Exception):
    """Raised when user lacks the grant for a module/action."""

    def __init__(self, module: Module, action: Action):
        super().__init__(f"Permission denied: {module.value}/{action.value}")
        self.module = module
        self.action = action


def has_permission(user: User | None, module: Module | str, action: Action | str = Action.VIEW) -> bool:
    if user is None or not user.is_active:
        return False
    if user.is_admin:
        return True

    module = parse_module(module)
    action = parse_action(action)

    grant = db.session.query(UserPermission).filter_by(
        user_id=user.id,
        module=module.value,
        action=action.value,
    ).first()
    return bool(grant and grant.granted)


def require_permission(user: User | None, module: Module | str, action: Action | str = Action.VIEW) -> None:
    """Raise PermissionDeniedError (and log it) unless the user holds the grant."""
    module = parse_module(module)
    action = parse_action(action)
    if has_permission(user, module, action):
        return
    current_app.logger.warning(
        "Permission denied: user=%s module=%s action=%s",
        user.username if user else None,
        module.value,
        action.value,
    )
    raise PermissionDeniedError(module, action)


def list_grants(user: User) -> list[dict]:
    """
    Effective grants of a user as [{"module", "action", "granted"}].

    Administrators get the full module x action matrix.
    """
    if user.is_admin:
        return [
            {"module": module.value, "action": action.value, "granted": True}
            for module in Module
            for action in Action
        ]

    rows = (
        db.session.query(UserPermission)
        .filter_by(user_id=user.id)
        .order_by(UserPermission.module, UserPermission.action)
        .all()
    )
    return [row.to_dict() for row in rows]


def _parse_grants(grants: Iterable) -> dict[tuple[Module, Action], bool]:
    if grants is None or isinstance(grants, (str, dict)):
        raise ValidationError("Validation failed", {"permissions": "must be a list"})

    parsed: dict[tuple[Module, Action], bool] = {}
    errors: dict[str, str] = {}
    for idx, entry in enumerate(grants):
        if not isinstance(entry, dict):
            errors[f"permissions[{idx}]"] = "must be an object"
            continue
        try:
            module = parse_module(entry.get("module"))
            action = parse_action(entry.get("action"))
        except ValueError as exc:
            errors[f"permissions[{idx}]"] = str(exc)
            continue
        granted = entry.get("granted", True)
        if not isinstance(granted, bool):
            errors[f"permissions[{idx}]"] = "granted must be a boolean"
            continue
        parsed[(module, action)] = granted

    if errors:
        raise ValidationError("Validation failed", errors)
    return parsed


def set_grants(user: User, grants: Iterable) -> list[dict]:
    """
    Replace every grant row of `user` with `grants`.

    grants: iterable of {"module", "action", "granted"?}; granted defaults to True.
    Duplicate (module, action) pairs collapse, last one wins.
    """
    parsed = _parse_grants(grants)

    db.session.query(UserPermission).filter_by(user_id=user.id).delete()
    for (module, action), granted in parsed.items():
        db.session.add(UserPermission(
            user_id=user.id,
            module=module.value,
            action=action.value,
            granted=granted,
        ))
    db.session.commit()
    return list_grants(user)


def grant(user: User, module: Module | str, action: Action | str, granted: bool = True) -> UserPermission:
    """Upsert a single grant row."""
    module = parse_module(module)
    action = parse_action(action)
    row = db.session.query(UserPermission).filter_by(
        user_id=user.id, module=module.value, action=action.value
    ).first()
    if row is None:
        row = UserPermission(user_id=user.id, module=module.value, action=action.value)
        db.session.add(row)
    row.granted = granted
    db.session.commit()
    return row


def revoke(user: User, module: Module | str, action: Action | str) -> bool:
    """Delete a single grant row. Returns True if a row was removed."""
    module = parse_module(module)
    action = parse_action(action)
    deleted = db.session.query(UserPermission).filter_by(
        user_id=user.id, module=module.value, action=action.value
    ).delete()
    db.session.commit()
    return bool(deleted)
