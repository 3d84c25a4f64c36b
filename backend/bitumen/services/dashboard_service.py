# Overview: Aggregate counters for the dashboard module.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..models import Client, ClientCategory, Order, Payment, PaymentStatus, Task, TaskStatus, User
from ..models.orders import CLOSED_ORDER_STATUSES, OUTSTANDING_PAYMENT_STATUSES
from ..permissions import Action, Module
from .permission_service import require_permission


def dashboard_stats(user: User) -> dict:
    """Requires DASHBOARD/VIEW. Counts only active clients and payments."""
    require_permission(user, Module.DASHBOARD, Action.VIEW)

    by_category = {category.value: 0 for category in ClientCategory}
    rows = (
        db.session.query(Client.category, func.count(Client.id))
        .filter(Client.is_active.is_(True))
        .group_by(Client.category)
        .all()
    )
    for category, count in rows:
        by_category[category] = count

    outstanding_count, outstanding_sum = (
        db.session.query(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
        .filter(
            Payment.is_active.is_(True),
            Payment.status.in_(OUTSTANDING_PAYMENT_STATUSES),
        )
        .one()
    )

    overdue_count = (
        db.session.query(func.count(Payment.id))
        .filter(Payment.is_active.is_(True), Payment.status == PaymentStatus.OVERDUE.value)
        .scalar()
    )

    open_orders = (
        db.session.query(func.count(Order.id))
        .filter(Order.status.notin_(CLOSED_ORDER_STATUSES))
        .scalar()
    )

    open_tasks = (
        db.session.query(func.count(Task.id))
        .filter(Task.status != TaskStatus.COMPLETED.value)
        .scalar()
    )

    return {
        "clients_by_category": by_category,
        "total_clients": sum(by_category.values()),
        "outstanding_payments": {
            "count": outstanding_count,
            "amount": str(Decimal(str(outstanding_sum)).quantize(Decimal("0.01"))),
        },
        "overdue_payments": overdue_count,
        "open_orders": open_orders,
        "open_tasks": open_tasks,
    }
