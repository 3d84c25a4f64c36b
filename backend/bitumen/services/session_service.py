# Overview: Service-layer operations for session; token issue, lookup and logout.

"""
Session Token Management Service

Tokens are 32 random bytes, handed to the client once and stored only as a
SHA-256 hash. Sessions last SESSION_DURATION_DAYS (7 by default). Expiry is
enforced lazily: the first lookup after expiry deletes the row. The
`sessions purge-expired` CLI command clears rows nobody looks up again.
"""

import hashlib
import secrets
from datetime import datetime, timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from .auth_service import authenticate
from bitumen.time_utils import utcnow


DEFAULT_SESSION_DURATION = timedelta(days=7)


def _session_duration() -> timedelta:
    days = current_app.config.get("SESSION_DURATION_DAYS")
    return timedelta(days=days) if days else DEFAULT_SESSION_DURATION


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user: User,
    user_agent: str | None = None,
    ip_address: str | None = None,
    now: datetime | None = None,
) -> tuple[SessionToken, str]:
    """
    Persist a new session for `user`.

    Returns (session_record, plaintext_token).
    """
    now = now or utcnow()
    plaintext_token = generate_token()

    session = SessionToken(
        user_id=user.id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        expires_at=now + _session_duration(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def login(
    username: str,
    password: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[User, str]:
    """Authenticate and open a session. Raises AuthenticationError."""
    user = authenticate(username, password)
    _, token = create_session(user, user_agent=user_agent, ip_address=ip_address)
    current_app.logger.info("User %s logged in", user.username)
    return user, token


def resolve_session(token: str | None, now: datetime | None = None) -> User | None:
    """
    Map a plaintext token to its active user.

    Returns None if the token is unknown, expired (the row is deleted) or
    belongs to a deactivated user.
    """
    if not token:
        return None

    now = now or utcnow()
    session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if not session:
        return None

    if session.expires_at <= now:
        db.session.delete(session)
        db.session.commit()
        return None

    user = session.user
    if not user or not user.is_active:
        return None

    return user


def logout(token: str | None) -> None:
    """Delete exactly the presented session. Unknown tokens are a no-op."""
    if not token:
        return
    deleted = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).delete()
    db.session.commit()
    if deleted:
        current_app.logger.info("Session logged out")


def revoke_user_sessions(user_id: int) -> int:
    """Delete every session of a user (deactivation). Returns number deleted."""
    count = db.session.query(SessionToken).filter_by(user_id=user_id).delete()
    db.session.commit()
    return count


def cleanup_expired_sessions(now: datetime | None = None) -> int:
    """Delete all expired session rows. Returns number deleted."""
    now = now or utcnow()
    count = db.session.query(SessionToken).filter(SessionToken.expires_at <= now).delete()
    db.session.commit()
    return count
