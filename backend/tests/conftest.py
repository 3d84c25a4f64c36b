"""
Pytest fixtures for the bitumen backend tests.

Provides an in-memory database, a test client, users per role and a
fake clock for the sync registry.
"""

from datetime import datetime, timedelta

import pytest

from bitumen import create_app
from bitumen.extensions import db
from bitumen.models import Client, User
from bitumen.permissions import Role
from bitumen.services import permission_service
from bitumen.services.auth_service import create_user
from bitumen.services.session_service import create_session
from bitumen.services.sync_registry import HeartbeatRegistry


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SYNC_SWEEP_ENABLED': False,
        'SYNC_AGENT_KEY': None,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


class FakeClock:
    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(scope='function')
def clock():
    return FakeClock()


@pytest.fixture(scope='function')
def registry(app, clock):
    """Fresh app-owned heartbeat registry driven by the fake clock."""
    previous = app.extensions["sync_registry"]
    reg = HeartbeatRegistry(
        status_timeout=timedelta(seconds=app.config["SYNC_STATUS_TIMEOUT_SECONDS"]),
        eviction_timeout=timedelta(seconds=app.config["SYNC_EVICTION_TIMEOUT_SECONDS"]),
        clock=clock,
    )
    app.extensions["sync_registry"] = reg
    yield reg
    app.extensions["sync_registry"] = previous


def make_user(username: str, role: Role = Role.SALES_EXECUTIVE, grants=None) -> User:
    """Create a user; grants is an iterable of (module, action) pairs."""
    user = create_user(
        username=username,
        email=f"{username}@bitumen.test",
        password=TEST_PASSWORD,
        first_name=username.title(),
        last_name="Tester",
        role=role,
    )
    if grants:
        permission_service.set_grants(user, [
            {"module": module, "action": action} for module, action in grants
        ])
    return user


def auth_headers_for(user: User) -> dict:
    """Open a session directly and return Authorization headers."""
    _, token = create_session(user)
    return auth_headers(token)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin(db_session):
    return make_user("admin", role=Role.ADMIN)


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers_for(admin)


@pytest.fixture(scope='function')
def sales_exec(db_session):
    """SALES_EXECUTIVE with no grants at all."""
    return make_user("sales", role=Role.SALES_EXECUTIVE)


@pytest.fixture(scope='function')
def sales_headers(sales_exec):
    return auth_headers_for(sales_exec)


@pytest.fixture(scope='function')
def client_record(db_session):
    """A client row to hang orders, payments and quotations on."""
    record = Client(name="Highway Builders", category="ALFA")
    db_session.add(record)
    db_session.commit()
    return record


def fresh(model, entity_id):
    """Re-read a row after requests have committed through another session."""
    db.session.expire_all()
    return db.session.get(model, entity_id)
