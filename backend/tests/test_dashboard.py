"""
Dashboard counter tests.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from bitumen.models import Client, Order, Payment, Task
from bitumen.services.dashboard_service import dashboard_stats
from bitumen.services.permission_service import PermissionDeniedError

from conftest import auth_headers_for, make_user


@pytest.fixture
def book(db_session):
    alfa = Client(name="Alfa One", category="ALFA")
    beta = Client(name="Beta One", category="BETA")
    gone = Client(name="Gone", category="BETA", is_active=False)
    db_session.add_all([alfa, beta, gone])
    db_session.flush()

    due = datetime(2024, 1, 31)
    db_session.add_all([
        Payment(client_id=alfa.id, amount=Decimal("1000.50"), status="PENDING", due_date=due),
        Payment(client_id=alfa.id, amount=Decimal("2000"), status="OVERDUE", due_date=due),
        Payment(client_id=beta.id, amount=Decimal("500"), status="PAID", due_date=due),
        Payment(client_id=beta.id, amount=Decimal("700"), status="OVERDUE", due_date=due, is_active=False),
        Order(order_number="SO-1", client_id=alfa.id, amount=1, status="APPROVED"),
        Order(order_number="SO-2", client_id=alfa.id, amount=1, status="DELIVERED"),
        Order(order_number="SO-3", client_id=beta.id, amount=1, status="CANCELLED"),
        Order(order_number="SO-4", client_id=beta.id, amount=1),
        Task(title="Open"),
        Task(title="Done", status="COMPLETED"),
    ])
    db_session.commit()


class TestDashboardStats:
    def test_counts(self, admin, book):
        stats = dashboard_stats(admin)
        assert stats["clients_by_category"] == {"ALFA": 1, "BETA": 1, "GAMMA": 0, "DELTA": 0}
        assert stats["total_clients"] == 2
        assert stats["outstanding_payments"] == {"count": 2, "amount": "3000.50"}
        assert stats["overdue_payments"] == 1
        assert stats["open_orders"] == 2
        assert stats["open_tasks"] == 1

    def test_empty(self, admin):
        stats = dashboard_stats(admin)
        assert stats["total_clients"] == 0
        assert stats["outstanding_payments"] == {"count": 0, "amount": "0.00"}

    def test_requires_dashboard_view(self, sales_exec):
        with pytest.raises(PermissionDeniedError):
            dashboard_stats(sales_exec)


class TestDashboardRoute:
    def test_granted_user(self, client, book):
        headers = auth_headers_for(make_user("viewer", grants=[("DASHBOARD", "VIEW")]))
        resp = client.get("/api/dashboard/stats", headers=headers)
        assert resp.status_code == 200
        assert resp.json["open_tasks"] == 1

    def test_denied(self, client, sales_headers):
        resp = client.get("/api/dashboard/stats", headers=sales_headers)
        assert resp.status_code == 403
        assert resp.json["module"] == "DASHBOARD"
