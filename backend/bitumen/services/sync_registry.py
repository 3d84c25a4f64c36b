# Overview: In-memory liveness tracking for desktop accounting agents; heartbeat, status and periodic eviction.

"""
Heartbeat Registry

The desktop agent posts a heartbeat every few seconds. Each client id maps
to the last time it was seen and whether it reported itself as the real
agent (test harnesses send is_real=false).

Lifecycle per client id:
    unknown -> connected (heartbeat)
            -> stale     (no heartbeat within status_timeout)
            -> evicted   (no heartbeat within eviction_timeout, removed by sweep)

One registry instance is owned by each Flask app
(app.extensions["sync_registry"]). The sweep runs as an APScheduler
interval job; tests skip the scheduler and call sweep() with a fake clock.
"""

from __future__ import annotations

import atexit
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from bitumen.time_utils import to_utc_z, utcnow


logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "REAL_WINDOWS_APP"


@dataclass
class AgentHeartbeat:
    client_id: str
    last_seen: datetime
    is_real: bool = True

    def to_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "last_seen": to_utc_z(self.last_seen),
            "is_real": self.is_real,
        }


class HeartbeatRegistry:
    def __init__(
        self,
        status_timeout: timedelta = timedelta(minutes=5),
        eviction_timeout: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.status_timeout = status_timeout
        self.eviction_timeout = eviction_timeout
        self.clock = clock
        self._entries: dict[str, AgentHeartbeat] = {}
        self._lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None

    def heartbeat(self, client_id: str | None = None, is_real: bool = True) -> AgentHeartbeat:
        """Record a heartbeat. Last write wins per client id."""
        client_id = client_id or DEFAULT_CLIENT_ID
        entry = AgentHeartbeat(client_id=client_id, last_seen=self.clock(), is_real=is_real)
        with self._lock:
            is_new = client_id not in self._entries
            self._entries[client_id] = entry
        if is_new:
            logger.info("Sync agent %s connected (real=%s)", client_id, is_real)
        return entry

    def _is_fresh(self, entry: AgentHeartbeat, now: datetime) -> bool:
        return now - entry.last_seen <= self.status_timeout

    def is_connected(self) -> bool:
        """True when at least one real agent has been seen within status_timeout."""
        now = self.clock()
        with self._lock:
            return any(entry.is_real and self._is_fresh(entry, now) for entry in self._entries.values())

    def get(self, client_id: str) -> AgentHeartbeat | None:
        with self._lock:
            return self._entries.get(client_id)

    def snapshot(self) -> list[AgentHeartbeat]:
        with self._lock:
            return list(self._entries.values())

    def status(self) -> dict:
        now = self.clock()
        with self._lock:
            entries = list(self._entries.values())
        connected = [e for e in entries if e.is_real and self._is_fresh(e, now)]
        last_seen = max((e.last_seen for e in entries), default=None)
        return {
            "connected": bool(connected),
            "last_heartbeat": to_utc_z(last_seen),
            "clients": [
                dict(e.to_dict(), connected=self._is_fresh(e, now))
                for e in sorted(entries, key=lambda e: e.client_id)
            ],
            "status_timeout_seconds": int(self.status_timeout.total_seconds()),
        }

    def sweep(self) -> list[str]:
        """Remove entries not seen within eviction_timeout. Returns evicted ids."""
        now = self.clock()
        with self._lock:
            expired = [
                client_id
                for client_id, entry in self._entries.items()
                if now - entry.last_seen > self.eviction_timeout
            ]
            for client_id in expired:
                del self._entries[client_id]
        for client_id in expired:
            logger.info("Evicted stale sync agent %s", client_id)
        return expired

    def start_sweeper(self, interval_seconds: int = 30) -> None:
        if self._scheduler is not None:
            return
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            self.sweep,
            "interval",
            seconds=interval_seconds,
            id="sync_registry_sweep",
            name="Evict stale sync agents",
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        atexit.register(self.stop_sweeper)
        logger.info("Sync agent sweep started (every %ss)", interval_seconds)

    def stop_sweeper(self) -> None:
        """Shut the sweep job down. Also runs at interpreter exit."""
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is None:
            return
        atexit.unregister(self.stop_sweeper)
        if scheduler.running:
            scheduler.shutdown(wait=False)
            logger.info("Sync agent sweep stopped")


def init_sync_registry(app) -> HeartbeatRegistry:
    """Create the app-owned registry and start its sweep job unless disabled."""
    registry = HeartbeatRegistry(
        status_timeout=timedelta(seconds=app.config["SYNC_STATUS_TIMEOUT_SECONDS"]),
        eviction_timeout=timedelta(seconds=app.config["SYNC_EVICTION_TIMEOUT_SECONDS"]),
    )
    app.extensions["sync_registry"] = registry
    if app.config.get("SYNC_SWEEP_ENABLED"):
        registry.start_sweeper(app.config["SYNC_SWEEP_INTERVAL_SECONDS"])
    return registry


def get_registry(app=None) -> HeartbeatRegistry:
    if app is None:
        from flask import current_app
        app = current_app
    return app.extensions["sync_registry"]
