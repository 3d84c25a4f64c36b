# Overview: Service-layer operations for the accounting relay; upserts agent records by ledger GUID.

"""
Accounting Relay

The desktop agent pushes ledgers (clients), receivables (payments) and
sales vouchers (orders) as JSON arrays. Each record carries the ledger
GUID it has in the accounting package; a record whose GUID is already
known updates that row, otherwise a new row is created.

Records are processed one by one. A bad record produces an "error" result
and does not stop the rest of the batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import current_app

from ..extensions import db
from ..models import Client, OrderStatus
from ..validation import ConflictError, ValidationError
from .crud_service import service_for
from bitumen.time_utils import utcnow


class SyncUnavailableError(Exception):
    """Relay attempted while no real agent is connected (HTTP 503)."""


# Voucher statuses used by the agent that have no exact order-workflow twin
AGENT_ORDER_STATUS = {
    "PENDING": OrderStatus.PENDING_AGREEMENT.value,
    "CONFIRMED": OrderStatus.APPROVED.value,
    "SHIPPED": OrderStatus.IN_TRANSIT.value,
}


@dataclass
class RecordResult:
    tally_guid: str | None
    action: str
    id: int | None = None
    message: str | None = None

    def to_dict(self) -> dict:
        out = {"tally_guid": self.tally_guid, "action": self.action}
        if self.id is not None:
            out["id"] = self.id
        if self.message:
            out["message"] = self.message
        return out


def _pick(record: dict, *keys, default=None):
    for key in keys:
        if key in record:
            return record[key]
    return default


def _resolve_client_id(record: dict) -> Any:
    """clientId is our id; clientTallyGuid is the agent's ledger GUID for the client."""
    client_guid = _pick(record, "clientTallyGuid", "client_tally_guid")
    if client_guid:
        client = db.session.query(Client).filter_by(tally_guid=client_guid).first()
        if client is None:
            raise ValidationError("Validation failed", {"clientTallyGuid": f"no client with GUID {client_guid}"})
        return client.id
    return _pick(record, "clientId", "client_id")


def _client_fields(record: dict) -> dict:
    return {
        "name": _pick(record, "name"),
        "category": _pick(record, "category"),
        "contact_person": _pick(record, "contactPerson", "contact_person"),
        "email": _pick(record, "email"),
        "mobile_number": _pick(record, "phone", "mobile_number"),
        "billing_address_line": _pick(record, "address", "billing_address_line"),
        "credit_limit": _pick(record, "creditLimit", "credit_limit"),
    }


def _payment_fields(record: dict) -> dict:
    return {
        "client_id": _resolve_client_id(record),
        "amount": _pick(record, "amount"),
        "due_date": _pick(record, "dueDate", "due_date"),
        "status": _pick(record, "status"),
        "notes": _pick(record, "description", "notes"),
        "voucher_number": _pick(record, "voucherNumber", "voucher_number"),
        "voucher_type": _pick(record, "voucherType", "voucher_type"),
    }


def _order_fields(record: dict) -> dict:
    status = _pick(record, "status")
    if isinstance(status, str):
        status = AGENT_ORDER_STATUS.get(status.strip().upper(), status)
    return {
        "order_number": _pick(record, "orderNumber", "order_number"),
        "client_id": _resolve_client_id(record),
        "amount": _pick(record, "totalAmount", "amount"),
        "status": status,
        "description": _pick(record, "description"),
    }


RELAY_KINDS = {
    "clients": ("clients", _client_fields),
    "payments": ("payments", _payment_fields),
    "orders": ("orders", _order_fields),
}


def _upsert(resource: str, fields_for, record: dict) -> RecordResult:
    if not isinstance(record, dict):
        return RecordResult(None, "error", message="record must be an object")
    guid = _pick(record, "tallyGuid", "tally_guid")
    if not guid:
        return RecordResult(None, "error", message="tallyGuid is required")

    service = service_for(resource)
    try:
        fields = fields_for(record)
        existing = service.find_by(tally_guid=guid)
        if existing is not None:
            # Absent keys keep their stored value on update
            patch = {k: v for k, v in fields.items() if v is not None}
            entity = service.apply_update(existing, patch)
            action = "updated"
        else:
            payload = {k: v for k, v in fields.items() if v is not None}
            payload["tally_guid"] = guid
            entity = service.apply_create(payload)
            action = "created"
    except ValidationError as exc:
        db.session.rollback()
        detail = "; ".join(f"{k}: {v}" for k, v in exc.fields.items()) or exc.message
        return RecordResult(guid, "error", message=detail)
    except ConflictError as exc:
        return RecordResult(guid, "error", message=str(exc))

    entity.last_synced = utcnow()
    db.session.commit()
    return RecordResult(guid, action, id=entity.id)


def relay(kind: str, records, registry) -> list[RecordResult]:
    """
    Upsert a batch of agent records.

    Raises SyncUnavailableError when no real agent is connected and
    ValidationError when the body is not a list.
    """
    if not registry.is_connected():
        raise SyncUnavailableError("Accounting agent is not connected")
    if not isinstance(records, list):
        raise ValidationError("Validation failed", {"_": "expected a JSON array of records"})

    resource, fields_for = RELAY_KINDS[kind]
    results = [_upsert(resource, fields_for, record) for record in records]

    created = sum(1 for r in results if r.action == "created")
    updated = sum(1 for r in results if r.action == "updated")
    failed = sum(1 for r in results if r.action == "error")
    current_app.logger.info(
        "Relayed %s: %d created, %d updated, %d failed", kind, created, updated, failed
    )
    return results
