from __future__ import annotations

from ..extensions import db
from bitumen.permissions.roles import Role
from bitumen.time_utils import to_utc_z


class User(db.Model):
    """
    Staff accounts for authentication and attribution.

    Users are deactivated, never deleted, so orders, tasks and tour advances
    keep pointing at a real row.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_users_username"),
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    employee_code = db.Column(db.String(32), nullable=True, unique=True)
    mobile_number = db.Column(db.String(20), nullable=True)
    designation = db.Column(db.String(100), nullable=True)
    department = db.Column(db.String(100), nullable=True)

    role = db.Column(db.String(32), nullable=False, default=Role.SALES_EXECUTIVE.value)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "employee_code": self.employee_code,
            "mobile_number": self.mobile_number,
            "designation": self.designation,
            "department": self.department,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class SessionToken(db.Model):
    """
    Server-side login sessions.

    Only the SHA-256 hash of the token is stored; the plaintext lives in the
    client's cookie. Expired rows are removed on first access after expiry.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_id", "user_id"),
        db.Index("ix_session_tokens_expires_at", "expires_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    token_hash = db.Column(db.String(64), nullable=False, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    user_agent = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    user = db.relationship("User", backref=db.backref("sessions", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
            "user_agent": self.user_agent,
            "ip_address": self.ip_address,
        }


class UserPermission(db.Model):
    """
    One (module, action) grant for one user.

    A missing row means "not granted". Rows with granted=False are kept so an
    administrator can see an explicit revoke.
    """
    __tablename__ = "user_permissions"
    __table_args__ = (
        db.UniqueConstraint("user_id", "module", "action", name="uq_user_permissions_user_module_action"),
        db.Index("ix_user_permissions_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    module = db.Column(db.String(64), nullable=False)
    action = db.Column(db.String(16), nullable=False)
    granted = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("permissions", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "action": self.action,
            "granted": self.granted,
        }
