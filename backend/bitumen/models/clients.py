from __future__ import annotations

import enum

from ..extensions import db
from bitumen.time_utils import to_utc_z
from .columns import iso_date, money_str


class ClientCategory(str, enum.Enum):
    ALFA = "ALFA"
    BETA = "BETA"
    GAMMA = "GAMMA"
    DELTA = "DELTA"


class CompanyType(str, enum.Enum):
    PVT_LTD = "PVT_LTD"
    PARTNERSHIP = "PARTNERSHIP"
    PROPRIETOR = "PROPRIETOR"
    GOVT = "GOVT"
    OTHERS = "OTHERS"


class BankInterestMode(str, enum.Enum):
    FROM_DAY_1 = "FROM_DAY_1"
    FROM_DUE_DATE = "FROM_DUE_DATE"


class Client(db.Model):
    """
    Customer master record.

    tally_guid links the row to the ledger in the desktop accounting package
    so relayed records update instead of duplicating.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.Index("ix_clients_category", "category"),
        db.Index("ix_clients_primary_sales_person_id", "primary_sales_person_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(16), nullable=False)
    company_type = db.Column(db.String(16), nullable=True)

    billing_address_line = db.Column(db.String(255), nullable=True)
    billing_city = db.Column(db.String(100), nullable=True)
    billing_pincode = db.Column(db.String(10), nullable=True)
    billing_state = db.Column(db.String(100), nullable=True)
    billing_country = db.Column(db.String(100), nullable=True, default="India")

    gst_number = db.Column(db.String(15), nullable=True)
    pan_number = db.Column(db.String(10), nullable=True)

    contact_person = db.Column(db.String(100), nullable=True)
    mobile_number = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    payment_terms = db.Column(db.Integer, nullable=True, default=30)
    credit_limit = db.Column(db.Numeric(15, 2), nullable=True)
    interest_percent = db.Column(db.Numeric(5, 2), nullable=True)
    bank_interest = db.Column(db.String(16), nullable=True)
    po_required = db.Column(db.Boolean, nullable=False, default=False)

    primary_sales_person_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    last_contact_date = db.Column(db.DateTime(timezone=True), nullable=True)
    next_follow_up_date = db.Column(db.DateTime(timezone=True), nullable=True)

    tally_guid = db.Column(db.String(64), nullable=True, unique=True)
    last_synced = db.Column(db.DateTime(timezone=True), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    primary_sales_person = db.relationship("User", foreign_keys=[primary_sales_person_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "company_type": self.company_type,
            "billing_address_line": self.billing_address_line,
            "billing_city": self.billing_city,
            "billing_pincode": self.billing_pincode,
            "billing_state": self.billing_state,
            "billing_country": self.billing_country,
            "gst_number": self.gst_number,
            "pan_number": self.pan_number,
            "contact_person": self.contact_person,
            "mobile_number": self.mobile_number,
            "email": self.email,
            "payment_terms": self.payment_terms,
            "credit_limit": money_str(self.credit_limit),
            "interest_percent": money_str(self.interest_percent),
            "bank_interest": self.bank_interest,
            "po_required": self.po_required,
            "primary_sales_person_id": self.primary_sales_person_id,
            "last_contact_date": to_utc_z(self.last_contact_date),
            "next_follow_up_date": to_utc_z(self.next_follow_up_date),
            "tally_guid": self.tally_guid,
            "last_synced": to_utc_z(self.last_synced),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CreditAgreement(db.Model):
    __tablename__ = "credit_agreements"
    __table_args__ = (
        db.UniqueConstraint("agreement_number", name="uq_credit_agreements_number"),
        db.Index("ix_credit_agreements_client_id", "client_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)

    agreement_number = db.Column(db.String(64), nullable=False)
    credit_limit = db.Column(db.Numeric(15, 2), nullable=False)
    payment_terms = db.Column(db.Integer, nullable=False)
    interest_rate = db.Column(db.Numeric(5, 2), nullable=True)

    signed_at = db.Column(db.Date, nullable=True)
    expires_at = db.Column(db.Date, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("credit_agreements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "agreement_number": self.agreement_number,
            "credit_limit": money_str(self.credit_limit),
            "payment_terms": self.payment_terms,
            "interest_rate": money_str(self.interest_rate),
            "signed_at": iso_date(self.signed_at),
            "expires_at": iso_date(self.expires_at),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SalesRate(db.Model):
    """Daily per-client selling rate and volume recorded by a sales person."""
    __tablename__ = "sales_rates"
    __table_args__ = (
        db.Index("ix_sales_rates_client_id", "client_id"),
        db.Index("ix_sales_rates_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=False)
    sales_person_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    date = db.Column(db.Date, nullable=False)
    rate = db.Column(db.Numeric(15, 2), nullable=False)
    volume = db.Column(db.Numeric(15, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    client = db.relationship("Client", backref=db.backref("sales_rates", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "sales_person_id": self.sales_person_id,
            "date": iso_date(self.date),
            "rate": money_str(self.rate),
            "volume": money_str(self.volume),
            "notes": self.notes,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
