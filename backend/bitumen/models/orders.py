from __future__ import annotations

import enum

from ..extensions import db
from bitumen.time_utils import to_utc_z
from .columns import money_str


class OrderStatus(str, enum.Enum):
    PENDING_AGREEMENT = "PENDING_AGREEMENT"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    LOADING = "LOADING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


CLOSED_ORDER_STATUSES = (OrderStatus.DELIVERED.value, OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value)


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    PAID = "PAID"
    PARTIAL = "PARTIAL"


OUTSTANDING_PAYMENT_STATUSES = (PaymentStatus.PENDING.value, PaymentStatus.OVERDUE.value, PaymentStatus.PARTIAL.value)


class TrackingStatus(str, enum.Enum):
    LOADING = "LOADING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"


class Order(db.Model):
    """
    Customer order moving through the dispatch workflow.

    Orders are never deleted; cancelling moves status to CANCELLED.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_number", name="uq_orders_order_number"),
        db.Index("ix_orders_client_id", "client_id"),
        db.Index("ix_orders_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(64), nullable=False)

    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)
    sales_person_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    amount = db.Column(db.Numeric(15, 2), nullable=False)
    status = db.Column(db.String(32), nullable=False, default=OrderStatus.PENDING_AGREEMENT.value)
    description = db.Column(db.Text, nullable=True)

    credit_agreement_required = db.Column(db.Boolean, nullable=False, default=True)
    credit_agreement_id = db.Column(db.Integer, db.ForeignKey("credit_agreements.id"), nullable=True)

    expected_delivery_date = db.Column(db.DateTime(timezone=True), nullable=True)

    tally_guid = db.Column(db.String(64), nullable=True, unique=True)
    last_synced = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "client_id": self.client_id,
            "sales_person_id": self.sales_person_id,
            "amount": money_str(self.amount),
            "status": self.status,
            "description": self.description,
            "credit_agreement_required": self.credit_agreement_required,
            "credit_agreement_id": self.credit_agreement_id,
            "expected_delivery_date": to_utc_z(self.expected_delivery_date),
            "tally_guid": self.tally_guid,
            "last_synced": to_utc_z(self.last_synced),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Payment(db.Model):
    """Receivable from a client, optionally tied to an order."""
    __tablename__ = "payments"
    __table_args__ = (
        db.Index("ix_payments_client_id", "client_id"),
        db.Index("ix_payments_status", "status"),
        db.Index("ix_payments_due_date", "due_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)

    amount = db.Column(db.Numeric(15, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=PaymentStatus.PENDING.value)
    due_date = db.Column(db.DateTime(timezone=True), nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)
    reminders_sent = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    voucher_number = db.Column(db.String(64), nullable=True)
    voucher_type = db.Column(db.String(64), nullable=True)
    tally_guid = db.Column(db.String(64), nullable=True, unique=True)
    last_synced = db.Column(db.DateTime(timezone=True), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("payments", lazy=True))
    order = db.relationship("Order", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "order_id": self.order_id,
            "amount": money_str(self.amount),
            "status": self.status,
            "due_date": to_utc_z(self.due_date),
            "paid_at": to_utc_z(self.paid_at),
            "reminders_sent": self.reminders_sent,
            "notes": self.notes,
            "voucher_number": self.voucher_number,
            "voucher_type": self.voucher_type,
            "tally_guid": self.tally_guid,
            "last_synced": to_utc_z(self.last_synced),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class EwayBill(db.Model):
    """Transport permit for an order's consignment."""
    __tablename__ = "eway_bills"
    __table_args__ = (
        db.UniqueConstraint("eway_number", name="uq_eway_bills_eway_number"),
        db.Index("ix_eway_bills_order_id", "order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    eway_number = db.Column(db.String(32), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    vehicle_number = db.Column(db.String(20), nullable=False)
    driver_name = db.Column(db.String(100), nullable=True)
    driver_phone = db.Column(db.String(20), nullable=True)

    valid_from = db.Column(db.DateTime(timezone=True), nullable=False)
    valid_until = db.Column(db.DateTime(timezone=True), nullable=False)
    is_extended = db.Column(db.Boolean, nullable=False, default=False)
    extension_count = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    order = db.relationship("Order", backref=db.backref("eway_bills", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "eway_number": self.eway_number,
            "order_id": self.order_id,
            "vehicle_number": self.vehicle_number,
            "driver_name": self.driver_name,
            "driver_phone": self.driver_phone,
            "valid_from": to_utc_z(self.valid_from),
            "valid_until": to_utc_z(self.valid_until),
            "is_extended": self.is_extended,
            "extension_count": self.extension_count,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PurchaseOrder(db.Model):
    """Client's purchase order raised against one of our orders."""
    __tablename__ = "purchase_orders"
    __table_args__ = (
        db.UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
        db.Index("ix_purchase_orders_client_id", "client_id"),
        db.Index("ix_purchase_orders_order_id", "order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    po_number = db.Column(db.String(64), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)

    amount = db.Column(db.Numeric(15, 2), nullable=False)
    issued_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    valid_until = db.Column(db.DateTime(timezone=True), nullable=True)
    terms = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("purchase_orders", lazy=True))
    order = db.relationship("Order", backref=db.backref("purchase_orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "po_number": self.po_number,
            "order_id": self.order_id,
            "client_id": self.client_id,
            "amount": money_str(self.amount),
            "issued_at": to_utc_z(self.issued_at),
            "valid_until": to_utc_z(self.valid_until),
            "terms": self.terms,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ClientTracking(db.Model):
    """
    Position of a consignment on its way to the client.

    last_updated moves on every write so the tracking board can show how
    fresh each position is.
    """
    __tablename__ = "client_tracking"
    __table_args__ = (
        db.Index("ix_client_tracking_client_id", "client_id"),
        db.Index("ix_client_tracking_order_id", "order_id"),
        db.Index("ix_client_tracking_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    vehicle_number = db.Column(db.String(20), nullable=False)
    driver_name = db.Column(db.String(100), nullable=False)
    driver_phone = db.Column(db.String(20), nullable=True)

    current_location = db.Column(db.String(255), nullable=True)
    destination_location = db.Column(db.String(255), nullable=True)
    distance_remaining = db.Column(db.Integer, nullable=True)  # km
    estimated_arrival = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=TrackingStatus.LOADING.value)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    client = db.relationship("Client", backref=db.backref("tracking", lazy=True))
    order = db.relationship("Order", backref=db.backref("tracking", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "order_id": self.order_id,
            "vehicle_number": self.vehicle_number,
            "driver_name": self.driver_name,
            "driver_phone": self.driver_phone,
            "current_location": self.current_location,
            "destination_location": self.destination_location,
            "distance_remaining": self.distance_remaining,
            "estimated_arrival": to_utc_z(self.estimated_arrival),
            "status": self.status,
            "is_active": self.is_active,
            "last_updated": to_utc_z(self.last_updated),
            "created_at": to_utc_z(self.created_at),
        }
