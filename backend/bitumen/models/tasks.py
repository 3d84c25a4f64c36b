from __future__ import annotations

import enum

from ..extensions import db
from bitumen.time_utils import to_utc_z


class TaskType(str, enum.Enum):
    ONE_TIME = "ONE_TIME"
    RECURRING = "RECURRING"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"


class FollowUpStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Task(db.Model):
    """
    Work item assigned to a user, optionally about a client or order.

    Tasks are hard-deleted; their follow-ups go with them.
    """
    __tablename__ = "tasks"
    __table_args__ = (
        db.Index("ix_tasks_assigned_to", "assigned_to"),
        db.Index("ix_tasks_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(16), nullable=False, default=TaskType.ONE_TIME.value)
    priority = db.Column(db.String(16), nullable=False, default=TaskPriority.MEDIUM.value)
    status = db.Column(db.String(16), nullable=False, default=TaskStatus.TODO.value)

    assigned_to = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)
    mobile_number = db.Column(db.String(20), nullable=True)

    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    recurring_interval = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    follow_ups = db.relationship("FollowUp", backref="task", lazy=True, cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "priority": self.priority,
            "status": self.status,
            "assigned_to": self.assigned_to,
            "client_id": self.client_id,
            "order_id": self.order_id,
            "mobile_number": self.mobile_number,
            "due_date": to_utc_z(self.due_date),
            "completed_at": to_utc_z(self.completed_at),
            "recurring_interval": self.recurring_interval,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class FollowUp(db.Model):
    __tablename__ = "follow_ups"
    __table_args__ = (
        db.Index("ix_follow_ups_task_id", "task_id"),
        db.Index("ix_follow_ups_assigned_user_id", "assigned_user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey("tasks.id"), nullable=False)
    assigned_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    follow_up_date = db.Column(db.DateTime(timezone=True), nullable=False)
    remarks = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default=FollowUpStatus.PENDING.value)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    next_follow_up_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "assigned_user_id": self.assigned_user_id,
            "follow_up_date": to_utc_z(self.follow_up_date),
            "remarks": self.remarks,
            "status": self.status,
            "completed_at": to_utc_z(self.completed_at),
            "next_follow_up_date": to_utc_z(self.next_follow_up_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
