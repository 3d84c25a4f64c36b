from __future__ import annotations

import enum

from ..extensions import db
from bitumen.time_utils import to_utc_z
from .columns import iso_date, money_str


class TravelMode(str, enum.Enum):
    AIR = "AIR"
    TRAIN = "TRAIN"
    CAR = "CAR"
    BUS = "BUS"
    OTHER = "OTHER"


class TourAdvanceStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    RECOMMENDED = "RECOMMENDED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SETTLED = "SETTLED"


class TourAdvance(db.Model):
    """
    Travel-advance request raised by an employee before a sales tour.

    Employee name, designation and department are snapshotted at request time.
    """
    __tablename__ = "tour_advances"
    __table_args__ = (
        db.Index("ix_tour_advances_employee_id", "employee_id"),
        db.Index("ix_tour_advances_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    employee_name = db.Column(db.String(200), nullable=False)
    designation = db.Column(db.String(100), nullable=True)
    department = db.Column(db.String(100), nullable=True)

    main_destination = db.Column(db.String(200), nullable=False)
    purpose_of_trip = db.Column(db.Text, nullable=False)
    tour_start_date = db.Column(db.Date, nullable=False)
    tour_end_date = db.Column(db.Date, nullable=False)
    number_of_days = db.Column(db.Integer, nullable=False)
    mode_of_travel = db.Column(db.String(16), nullable=False)

    advance_required = db.Column(db.Boolean, nullable=False, default=False)
    advance_amount_requested = db.Column(db.Numeric(15, 2), nullable=True)
    sanction_amount_approved = db.Column(db.Numeric(15, 2), nullable=True)
    sanction_authority = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=TourAdvanceStatus.DRAFT.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    employee = db.relationship("User", foreign_keys=[employee_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "designation": self.designation,
            "department": self.department,
            "main_destination": self.main_destination,
            "purpose_of_trip": self.purpose_of_trip,
            "tour_start_date": iso_date(self.tour_start_date),
            "tour_end_date": iso_date(self.tour_end_date),
            "number_of_days": self.number_of_days,
            "mode_of_travel": self.mode_of_travel,
            "advance_required": self.advance_required,
            "advance_amount_requested": money_str(self.advance_amount_requested),
            "sanction_amount_approved": money_str(self.sanction_amount_approved),
            "sanction_authority": self.sanction_authority,
            "status": self.status,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
