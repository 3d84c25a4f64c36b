# backend/bitumen/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/bitumen.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///bitumen.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Browser origins allowed to call the API with credentials
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]

    # Sessions
    SESSION_DURATION_DAYS = int(os.environ.get("SESSION_DURATION_DAYS", "7"))
    AUTH_COOKIE_NAME = os.environ.get("AUTH_COOKIE_NAME", "sessionToken")
    AUTH_COOKIE_SECURE = _env_bool("AUTH_COOKIE_SECURE", False)

    # bcrypt cost factor; tests lower it
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Desktop accounting agent (heartbeat bridge)
    SYNC_STATUS_TIMEOUT_SECONDS = int(os.environ.get("SYNC_STATUS_TIMEOUT_SECONDS", "300"))
    SYNC_EVICTION_TIMEOUT_SECONDS = int(os.environ.get("SYNC_EVICTION_TIMEOUT_SECONDS", "900"))
    SYNC_SWEEP_INTERVAL_SECONDS = int(os.environ.get("SYNC_SWEEP_INTERVAL_SECONDS", "30"))
    SYNC_SWEEP_ENABLED = _env_bool("SYNC_SWEEP_ENABLED", True)
    # Shared key the agent must send as X-Sync-Key; unset disables the check
    SYNC_AGENT_KEY = os.environ.get("SYNC_AGENT_KEY") or None
