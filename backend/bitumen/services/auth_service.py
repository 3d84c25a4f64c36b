# Overview: Service-layer operations for auth; password hashing, registration and login.

"""
Authentication Service

Passwords are hashed with bcrypt. Login failures never reveal which part
was wrong: unknown username, inactive account and bad password all raise
the same AuthenticationError.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, with uppercase, lowercase, digit and special char
- Session tokens managed separately (see session_service.py)
- Self-registration can never produce an administrator
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from ..permissions import Role, parse_role
from ..validation import ConflictError, ValidationError, require_fields
from bitumen.time_utils import utcnow


class AuthenticationError(Exception):
    """Raised when credentials or a session cannot be verified."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
        self.message = message


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt (cost factor BCRYPT_ROUNDS, default 12)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. A malformed stored hash counts as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


_dummy_hash: str | None = None


def _dummy_password_hash() -> str:
    """Hash checked for unknown usernames so a miss costs the same as a wrong password."""
    global _dummy_hash
    if _dummy_hash is None:
        salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
        _dummy_hash = bcrypt.hashpw(b"not-a-real-password", salt).decode("utf-8")
    return _dummy_hash


def ensure_unique_identity(
    username: str,
    email: str,
    exclude_user_id: int | None = None,
    employee_code: str | None = None,
) -> None:
    """Raise ConflictError when another user holds the username, email or employee code."""
    clauses = [User.username == username, User.email == email]
    if employee_code:
        clauses.append(User.employee_code == employee_code)
    query = db.session.query(User).filter(db.or_(*clauses))
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    existing = query.first()
    if existing:
        if existing.username == username:
            raise ConflictError("Username already exists")
        if existing.email == email:
            raise ConflictError("Email already exists")
        raise ConflictError("Employee code already exists")


def create_user(
    username: str,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: Role | str = Role.SALES_EXECUTIVE,
    **profile,
) -> User:
    """
    Create a user with a bcrypt-hashed password.

    profile may carry employee_code, mobile_number, designation, department.

    Raises:
        ConflictError: username, email or employee code already taken
        PasswordValidationError: weak password
        ValueError: unknown role
    """
    role = parse_role(role)
    employee_code = str(profile.get("employee_code") or "").strip() or None
    ensure_unique_identity(username, email, employee_code=employee_code)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role.value,
        employee_code=employee_code,
        mobile_number=profile.get("mobile_number") or None,
        designation=profile.get("designation") or None,
        department=profile.get("department") or None,
    )

    db.session.add(user)
    db.session.commit()
    return user


def register(payload: dict) -> User:
    """
    Public self-registration.

    Collects every field problem before failing. The role defaults to
    SALES_EXECUTIVE and may be any role except ADMIN.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", {"_": "expected a JSON object"})

    username = (payload.get("username") or "").strip()
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""
    first_name = (payload.get("first_name") or payload.get("firstName") or "").strip()
    last_name = (payload.get("last_name") or payload.get("lastName") or "").strip()
    confirm = payload.get("confirm_password", payload.get("confirmPassword"))

    errors = require_fields(
        {
            "username": username,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
        },
        ("username", "password", "first_name", "last_name", "email"),
    )

    if email and "@" not in email:
        errors["email"] = "must be a valid email address"

    if password and confirm is not None and confirm != password:
        errors["confirm_password"] = "passwords do not match"

    if password and "password" not in errors:
        try:
            validate_password_strength(password)
        except PasswordValidationError as exc:
            errors["password"] = str(exc)

    role = Role.SALES_EXECUTIVE
    raw_role = payload.get("role")
    if raw_role:
        try:
            role = parse_role(raw_role)
        except ValueError as exc:
            errors["role"] = str(exc)
        else:
            if role == Role.ADMIN:
                errors["role"] = "cannot self-register as ADMIN"

    if errors:
        raise ValidationError("Validation failed", errors)

    return create_user(
        username=username,
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        role=role,
        employee_code=payload.get("employee_code"),
        mobile_number=payload.get("mobile_number"),
        designation=payload.get("designation"),
        department=payload.get("department"),
    )


def authenticate(username: str, password: str) -> User:
    """
    Verify credentials and stamp last_login_at.

    Accepts username or email. Raises AuthenticationError("Invalid credentials")
    for every failure mode.
    """
    if not username or not password:
        raise AuthenticationError()

    user = db.session.query(User).filter(
        db.or_(User.username == username, User.email == username)
    ).first()

    if user is None:
        verify_password(password, _dummy_password_hash())

    if not user or not user.is_active or not verify_password(password, user.password_hash):
        current_app.logger.warning("Failed login for %r", username)
        raise AuthenticationError()

    user.last_login_at = utcnow()
    db.session.commit()
    return user
