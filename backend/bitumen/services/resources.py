# Overview: Registry of CRUD resources; which model, module, validation policy and list options each one uses.

"""
Resource Registry

Each entry ties a URL slug to a model, the permission module that gates it,
the write policy, list filters and delete behaviour. The generic CRUD
service, the routes and the report exports all read from RESOURCES.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from ..extensions import db
from ..models import (
    BankInterestMode,
    Client,
    ClientTracking,
    ClientCategory,
    CompanyType,
    CreditAgreement,
    EwayBill,
    FollowUp,
    FollowUpStatus,
    Order,
    OrderStatus,
    Payment,
    PaymentStatus,
    PurchaseOrder,
    Quotation,
    QuotationItem,
    QuotationStatus,
    SalesRate,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    TourAdvance,
    TourAdvanceStatus,
    TrackingStatus,
    TravelMode,
    User,
)
from ..permissions import Module
from ..validation import ModelValidationPolicy, ValidationError


@dataclass(frozen=True)
class ResourceSpec:
    """
    name: URL slug under /api
    label: human name used in error messages and report titles
    hard_delete: row is removed; otherwise it is soft-deleted
    cancel_status: status a soft delete moves to (None if the model has no status)
    active_flag: model has is_active and soft delete clears it
    export_columns: CSV/PDF column order
    """
    name: str
    label: str
    model: type
    module: Module
    policy: ModelValidationPolicy
    filter_fields: tuple[str, ...] = ()
    search_fields: tuple[str, ...] = ()
    hard_delete: bool = False
    cancel_status: str | None = None
    active_flag: bool = True
    export_columns: tuple[str, ...] = ()
    # Cross-field rules run on the patched entity before commit; raise ValidationError
    rules: Optional[Callable] = None


CLIENT_FIELDS = frozenset({
    "name", "category", "company_type",
    "billing_address_line", "billing_city", "billing_pincode", "billing_state", "billing_country",
    "gst_number", "pan_number", "contact_person", "mobile_number", "email",
    "payment_terms", "credit_limit", "interest_percent", "bank_interest", "po_required",
    "primary_sales_person_id", "last_contact_date", "next_follow_up_date",
    "tally_guid", "is_active",
})


def _tour_advance_rules(entity) -> None:
    if entity.tour_start_date and entity.tour_end_date and entity.tour_end_date < entity.tour_start_date:
        raise ValidationError("Validation failed", {"tour_end_date": "must not be before tour_start_date"})


def _quotation_item_rules(entity) -> None:
    # amount defaults to quantity x (rate + delivery_rate); a supplied amount, including 0, is kept
    if entity.amount is None and entity.quantity is not None and entity.rate is not None:
        delivery = entity.delivery_rate if entity.delivery_rate is not None else Decimal("0")
        entity.amount = (Decimal(entity.quantity) * (Decimal(entity.rate) + Decimal(delivery))).quantize(Decimal("0.01"))


def _order_belongs_to_client(entity) -> None:
    with db.session.no_autoflush:
        order = db.session.get(Order, entity.order_id)
    if order is not None and order.client_id != entity.client_id:
        raise ValidationError("Validation failed", {"order_id": "belongs to a different client"})


def _purchase_order_rules(entity) -> None:
    _order_belongs_to_client(entity)
    if entity.issued_at and entity.valid_until and entity.valid_until < entity.issued_at:
        raise ValidationError("Validation failed", {"valid_until": "must not be before issued_at"})


RESOURCES: dict[str, ResourceSpec] = {}


def _register(spec: ResourceSpec) -> ResourceSpec:
    RESOURCES[spec.name] = spec
    return spec


CLIENTS = _register(ResourceSpec(
    name="clients",
    label="Client",
    model=Client,
    module=Module.CLIENT_MANAGEMENT,
    policy=ModelValidationPolicy(
        writable_fields=CLIENT_FIELDS,
        required_on_create=frozenset({"name", "category"}),
        choices={
            "category": ClientCategory,
            "company_type": CompanyType,
            "bank_interest": BankInterestMode,
        },
        references={"primary_sales_person_id": User},
        min_values={"payment_terms": 0, "credit_limit": Decimal("0"), "interest_percent": Decimal("0")},
    ),
    filter_fields=("category", "company_type", "primary_sales_person_id", "billing_city"),
    search_fields=("name", "contact_person", "mobile_number", "email", "gst_number"),
    export_columns=(
        "id", "name", "category", "company_type", "contact_person", "mobile_number",
        "email", "billing_city", "gst_number", "payment_terms", "credit_limit",
    ),
))

CREDIT_AGREEMENTS = _register(ResourceSpec(
    name="credit-agreements",
    label="Credit agreement",
    model=CreditAgreement,
    module=Module.CREDIT_AGREEMENTS,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "client_id", "agreement_number", "credit_limit", "payment_terms",
            "interest_rate", "signed_at", "expires_at", "is_active",
        }),
        required_on_create=frozenset({"client_id", "agreement_number", "credit_limit", "payment_terms"}),
        references={"client_id": Client},
        min_values={"credit_limit": Decimal("0"), "payment_terms": 0},
    ),
    filter_fields=("client_id",),
    search_fields=("agreement_number",),
    export_columns=(
        "id", "agreement_number", "client_id", "credit_limit", "payment_terms",
        "interest_rate", "signed_at", "expires_at",
    ),
))

ORDERS = _register(ResourceSpec(
    name="orders",
    label="Order",
    model=Order,
    module=Module.ORDER_WORKFLOW,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "order_number", "client_id", "sales_person_id", "amount", "status",
            "description", "credit_agreement_required", "credit_agreement_id",
            "expected_delivery_date", "tally_guid",
        }),
        required_on_create=frozenset({"order_number", "client_id", "amount"}),
        choices={"status": OrderStatus},
        references={
            "client_id": Client,
            "sales_person_id": User,
            "credit_agreement_id": CreditAgreement,
        },
        min_values={"amount": Decimal("0")},
    ),
    filter_fields=("client_id", "status", "sales_person_id"),
    search_fields=("order_number", "description"),
    cancel_status=OrderStatus.CANCELLED.value,
    active_flag=False,
    export_columns=(
        "id", "order_number", "client_id", "amount", "status",
        "expected_delivery_date", "created_at",
    ),
))

PAYMENTS = _register(ResourceSpec(
    name="payments",
    label="Payment",
    model=Payment,
    module=Module.CREDIT_PAYMENTS,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "client_id", "order_id", "amount", "status", "due_date", "paid_at",
            "reminders_sent", "notes", "voucher_number", "voucher_type",
            "tally_guid", "is_active",
        }),
        required_on_create=frozenset({"client_id", "amount", "due_date"}),
        choices={"status": PaymentStatus},
        references={"client_id": Client, "order_id": Order},
        min_values={"amount": Decimal("0"), "reminders_sent": 0},
    ),
    filter_fields=("client_id", "order_id", "status"),
    search_fields=("notes", "voucher_number"),
    export_columns=(
        "id", "client_id", "order_id", "amount", "status", "due_date",
        "paid_at", "voucher_number",
    ),
))

TASKS = _register(ResourceSpec(
    name="tasks",
    label="Task",
    model=Task,
    module=Module.TASK_MANAGEMENT,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "title", "description", "type", "priority", "status", "assigned_to",
            "client_id", "order_id", "mobile_number", "due_date", "completed_at",
            "recurring_interval",
        }),
        required_on_create=frozenset({"title"}),
        choices={"type": TaskType, "priority": TaskPriority, "status": TaskStatus},
        references={"assigned_to": User, "client_id": Client, "order_id": Order},
        min_values={"recurring_interval": 1},
    ),
    filter_fields=("assigned_to", "client_id", "order_id", "status", "priority", "type"),
    search_fields=("title", "description"),
    hard_delete=True,
    active_flag=False,
    export_columns=(
        "id", "title", "type", "priority", "status", "assigned_to",
        "client_id", "due_date", "completed_at",
    ),
))

FOLLOW_UPS = _register(ResourceSpec(
    name="follow-ups",
    label="Follow-up",
    model=FollowUp,
    module=Module.FOLLOW_UP_HUB,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "task_id", "assigned_user_id", "follow_up_date", "remarks", "status",
            "completed_at", "next_follow_up_date",
        }),
        required_on_create=frozenset({"task_id", "assigned_user_id", "follow_up_date"}),
        choices={"status": FollowUpStatus},
        references={"task_id": Task, "assigned_user_id": User},
    ),
    filter_fields=("task_id", "assigned_user_id", "status"),
    search_fields=("remarks",),
    cancel_status=FollowUpStatus.CANCELLED.value,
    active_flag=False,
    export_columns=(
        "id", "task_id", "assigned_user_id", "follow_up_date", "status",
        "next_follow_up_date", "remarks",
    ),
))

EWAY_BILLS = _register(ResourceSpec(
    name="eway-bills",
    label="E-way bill",
    model=EwayBill,
    module=Module.EWAY_BILLS,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "eway_number", "order_id", "vehicle_number", "driver_name", "driver_phone",
            "valid_from", "valid_until", "is_extended", "extension_count", "is_active",
        }),
        required_on_create=frozenset({"eway_number", "order_id", "vehicle_number", "valid_from", "valid_until"}),
        references={"order_id": Order},
        min_values={"extension_count": 0},
    ),
    filter_fields=("order_id", "vehicle_number"),
    search_fields=("eway_number", "vehicle_number", "driver_name"),
    export_columns=(
        "id", "eway_number", "order_id", "vehicle_number", "driver_name",
        "valid_from", "valid_until", "extension_count",
    ),
))

PURCHASE_ORDERS = _register(ResourceSpec(
    name="purchase-orders",
    label="Purchase order",
    model=PurchaseOrder,
    module=Module.PURCHASE_ORDERS,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "po_number", "order_id", "client_id", "amount", "issued_at",
            "valid_until", "terms", "is_active",
        }),
        required_on_create=frozenset({"po_number", "order_id", "client_id", "amount"}),
        references={"order_id": Order, "client_id": Client},
        min_values={"amount": Decimal("0")},
    ),
    filter_fields=("client_id", "order_id"),
    search_fields=("po_number", "terms"),
    rules=_purchase_order_rules,
    export_columns=("id", "po_number", "order_id", "client_id", "amount", "issued_at", "valid_until"),
))

CLIENT_TRACKING = _register(ResourceSpec(
    name="client-tracking",
    label="Consignment tracking",
    model=ClientTracking,
    module=Module.CLIENT_TRACKING,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "client_id", "order_id", "vehicle_number", "driver_name", "driver_phone",
            "current_location", "destination_location", "distance_remaining",
            "estimated_arrival", "status", "is_active",
        }),
        required_on_create=frozenset({"client_id", "order_id", "vehicle_number", "driver_name"}),
        choices={"status": TrackingStatus},
        references={"client_id": Client, "order_id": Order},
        min_values={"distance_remaining": 0},
    ),
    filter_fields=("client_id", "order_id", "status", "vehicle_number"),
    search_fields=("vehicle_number", "driver_name", "current_location", "destination_location"),
    rules=_order_belongs_to_client,
    export_columns=(
        "id", "client_id", "order_id", "vehicle_number", "driver_name", "current_location",
        "destination_location", "distance_remaining", "estimated_arrival", "status",
    ),
))

SALES_RATES = _register(ResourceSpec(
    name="sales-rates",
    label="Sales rate",
    model=SalesRate,
    module=Module.SALES_RATES,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({"client_id", "sales_person_id", "date", "rate", "volume", "notes", "is_active"}),
        required_on_create=frozenset({"client_id", "sales_person_id", "date", "rate"}),
        references={"client_id": Client, "sales_person_id": User},
        min_values={"rate": Decimal("0"), "volume": Decimal("0")},
    ),
    filter_fields=("client_id", "sales_person_id", "date"),
    search_fields=("notes",),
    export_columns=("id", "date", "client_id", "sales_person_id", "rate", "volume", "notes"),
))

TOUR_ADVANCES = _register(ResourceSpec(
    name="tour-advances",
    label="Tour advance",
    model=TourAdvance,
    module=Module.TOUR_ADVANCE,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "employee_id", "employee_name", "designation", "department",
            "main_destination", "purpose_of_trip", "tour_start_date", "tour_end_date",
            "number_of_days", "mode_of_travel", "advance_required",
            "advance_amount_requested", "sanction_amount_approved",
            "sanction_authority", "status", "is_active",
        }),
        required_on_create=frozenset({
            "employee_id", "employee_name", "main_destination", "purpose_of_trip",
            "tour_start_date", "tour_end_date", "number_of_days", "mode_of_travel",
        }),
        choices={"mode_of_travel": TravelMode, "status": TourAdvanceStatus},
        references={"employee_id": User},
        min_values={
            "number_of_days": 1,
            "advance_amount_requested": Decimal("0"),
            "sanction_amount_approved": Decimal("0"),
        },
    ),
    filter_fields=("employee_id", "status", "mode_of_travel"),
    search_fields=("employee_name", "main_destination", "purpose_of_trip"),
    export_columns=(
        "id", "employee_name", "department", "main_destination", "tour_start_date",
        "tour_end_date", "number_of_days", "mode_of_travel",
        "advance_amount_requested", "sanction_amount_approved", "status",
    ),

    rules=_tour_advance_rules,
))

QUOTATIONS = _register(ResourceSpec(
    name="quotations",
    label="Quotation",
    model=Quotation,
    module=Module.SALES,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({
            "quotation_number", "client_id", "sales_person_id", "quotation_date",
            "valid_until", "total_amount", "freight_charged", "status",
            "payment_terms", "delivery_terms", "is_active",
        }),
        required_on_create=frozenset({"quotation_number", "client_id", "quotation_date"}),
        choices={"status": QuotationStatus},
        references={"client_id": Client, "sales_person_id": User},
        min_values={"total_amount": Decimal("0"), "freight_charged": Decimal("0")},
    ),
    filter_fields=("client_id", "sales_person_id", "status"),
    search_fields=("quotation_number",),
    export_columns=(
        "id", "quotation_number", "client_id", "quotation_date", "valid_until",
        "total_amount", "freight_charged", "status",
    ),
))

QUOTATION_ITEMS = _register(ResourceSpec(
    name="quotation-items",
    label="Quotation item",
    model=QuotationItem,
    module=Module.SALES,
    policy=ModelValidationPolicy(
        writable_fields=frozenset({"quotation_id", "description", "quantity", "unit", "rate", "delivery_rate", "amount"}),
        required_on_create=frozenset({"quotation_id", "description", "quantity", "rate"}),
        references={"quotation_id": Quotation},
        min_values={"quantity": Decimal("0"), "rate": Decimal("0"), "delivery_rate": Decimal("0")},
    ),
    filter_fields=("quotation_id",),
    search_fields=("description",),
    hard_delete=True,
    active_flag=False,
    rules=_quotation_item_rules,
    export_columns=("id", "quotation_id", "description", "quantity", "unit", "rate", "delivery_rate", "amount"),
))


def get_resource(name: str) -> ResourceSpec:
    """Raises KeyError for unknown slugs."""
    return RESOURCES[name]
