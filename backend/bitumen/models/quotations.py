from __future__ import annotations

import enum

from ..extensions import db
from bitumen.time_utils import to_utc_z
from .columns import iso_date, money_str


class QuotationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    SENT = "SENT"
    REVISED = "REVISED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class Quotation(db.Model):
    __tablename__ = "quotations"
    __table_args__ = (
        db.UniqueConstraint("quotation_number", name="uq_quotations_quotation_number"),
        db.Index("ix_quotations_client_id", "client_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    quotation_number = db.Column(db.String(64), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)
    sales_person_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    quotation_date = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=True)
    total_amount = db.Column(db.Numeric(15, 2), nullable=True)
    freight_charged = db.Column(db.Numeric(15, 2), nullable=True)
    status = db.Column(db.String(32), nullable=False, default=QuotationStatus.DRAFT.value)
    payment_terms = db.Column(db.String(255), nullable=True)
    delivery_terms = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship("QuotationItem", backref="quotation", lazy=True, cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quotation_number": self.quotation_number,
            "client_id": self.client_id,
            "sales_person_id": self.sales_person_id,
            "quotation_date": iso_date(self.quotation_date),
            "valid_until": iso_date(self.valid_until),
            "total_amount": money_str(self.total_amount),
            "freight_charged": money_str(self.freight_charged),
            "status": self.status,
            "payment_terms": self.payment_terms,
            "delivery_terms": self.delivery_terms,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class QuotationItem(db.Model):
    """
    One priced line on a quotation.

    rate and delivery_rate are frequently 0 (ex-works or free delivery) and
    must round-trip as 0.
    """
    __tablename__ = "quotation_items"
    __table_args__ = (
        db.Index("ix_quotation_items_quotation_id", "quotation_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey("quotations.id"), nullable=False)

    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Numeric(15, 3), nullable=False)
    unit = db.Column(db.String(16), nullable=True, default="MT")
    rate = db.Column(db.Numeric(15, 2), nullable=False)
    delivery_rate = db.Column(db.Numeric(15, 2), nullable=True)
    amount = db.Column(db.Numeric(15, 2), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quotation_id": self.quotation_id,
            "description": self.description,
            "quantity": money_str(self.quantity),
            "unit": self.unit,
            "rate": money_str(self.rate),
            "delivery_rate": money_str(self.delivery_rate),
            "amount": money_str(self.amount),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
