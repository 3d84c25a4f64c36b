from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from bitumen.extensions import db
from bitumen.time_utils import parse_iso_datetime


class ValidationError(ValueError):
    """400-level input problem. `fields` maps field name -> message."""

    def __init__(self, message: str = "Validation failed", fields: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.fields = dict(fields or {})

    def to_dict(self) -> dict:
        body = {"error": "Validation failed"}
        if self.fields:
            body["fields"] = self.fields
        else:
            body["fields"] = {"_": self.message}
        return body


class ConflictError(ValueError):
    """409-level conflict (e.g., duplicate order number or username)."""


class NotFoundError(LookupError):
    """404-level missing entity."""

    def __init__(self, entity: str = "Resource"):
        super().__init__(f"{entity} not found")
        self.entity = entity


class NumericState(enum.Enum):
    ABSENT = "ABSENT"
    ZERO = "ZERO"
    NONZERO = "NONZERO"


@dataclass(frozen=True)
class OptionalNumeric:
    """
    A numeric form field that may be missing.

    Zero is a real value and must never collapse into "absent": a quotation
    line priced at 0 is stored as 0, not NULL. Only None and blank strings
    are absent.
    """
    value: Decimal | None

    @property
    def state(self) -> NumericState:
        if self.value is None:
            return NumericState.ABSENT
        if self.value == 0:
            return NumericState.ZERO
        return NumericState.NONZERO

    @property
    def is_absent(self) -> bool:
        return self.value is None

    @classmethod
    def parse(cls, raw: Any, field_name: str = "value") -> "OptionalNumeric":
        if raw is None:
            return cls(None)
        # bool is an int subclass; True must not become 1
        if isinstance(raw, bool):
            raise ValidationError(fields={field_name: "must be a number"})
        if isinstance(raw, (int, Decimal)):
            return cls(Decimal(raw))
        if isinstance(raw, float):
            if raw != raw or raw in (float("inf"), float("-inf")):
                raise ValidationError(fields={field_name: "must be a finite number"})
            return cls(Decimal(str(raw)))
        if isinstance(raw, str):
            s = raw.strip()
            if not s:
                return cls(None)
            try:
                value = Decimal(s)
            except InvalidOperation:
                raise ValidationError(fields={field_name: "must be a number"}) from None
            if not value.is_finite():
                raise ValidationError(fields={field_name: "must be a finite number"})
            return cls(value)
        raise ValidationError(fields={field_name: "must be a number"})


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: field -> closed enum of allowed values
    - references: field -> model whose row must exist
    - min_values: field -> inclusive lower bound for numeric fields
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    choices: dict[str, type[enum.Enum]] = field(default_factory=dict)
    references: dict[str, Any] = field(default_factory=dict)
    min_values: dict[str, Decimal] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    """Coerce a non-None raw value to the column's Python type. Raises ValueError(message)."""
    coltype = col.type

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            if "e" in stripped.lower():
                raise ValueError("must be a plain integer (scientific notation not allowed)")
            if "." in stripped:
                raise ValueError("must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValueError("must be an integer") from None
        if isinstance(value, float):
            raise ValueError("must be an integer, not a decimal")
        raise ValueError("must be an integer")

    if isinstance(coltype, Numeric):
        try:
            return OptionalNumeric.parse(value, col.key).value
        except ValidationError as exc:
            raise ValueError(exc.fields[col.key]) from None

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"true", "1", "yes", "on"}:
                return True
            if lowered in {"false", "0", "no", "off", ""}:
                return False
            raise ValueError("must be a boolean")
        if isinstance(value, int):
            return bool(value)
        raise ValueError("must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValueError("must be an ISO-8601 datetime") from None
            return dt
        raise ValueError("must be a datetime")

    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValueError("must be an ISO-8601 date") from None
            return dt.date() if dt else None
        raise ValueError("must be a date")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValueError("must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields), choices, references, min_values
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    All field problems are collected and raised together as one ValidationError.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", {"_": "expected a JSON object"})

    cols = _columns_by_key(model)
    errors: dict[str, str] = {}
    patch: dict = {}

    for k in payload.keys():
        if k not in policy.writable_fields or k not in cols:
            errors[k] = "field not allowed"

    for k, raw in payload.items():
        if k in errors:
            continue
        col = cols[k]

        if raw is None:
            val = None
        else:
            try:
                val = _coerce_value(col, raw)
            except ValueError as exc:
                errors[k] = str(exc)
                continue

        # "" for numbers and dates collapses to None above
        if val is None:
            if not col.nullable:
                errors[k] = "is required" if not partial or k in policy.required_on_create else "cannot be null"
                continue
            patch[k] = None
            continue

        if isinstance(col.type, (String, Text)):
            if val == "" and (not col.nullable or k in policy.required_on_create):
                errors[k] = "cannot be blank"
                continue
            if isinstance(col.type, String) and col.type.length and len(val) > col.type.length:
                errors[k] = f"exceeds max length {col.type.length}"
                continue

        choice_enum = policy.choices.get(k)
        if choice_enum is not None and val == "":
            patch[k] = None
            continue
        if choice_enum is not None:
            normalized = str(val).upper()
            allowed = [member.value for member in choice_enum]
            if normalized not in allowed:
                errors[k] = f"must be one of: {', '.join(allowed)}"
                continue
            val = normalized

        minimum = policy.min_values.get(k)
        if minimum is not None and val < minimum:
            errors[k] = f"must be >= {minimum}"
            continue

        ref_model = policy.references.get(k)
        if ref_model is not None and db.session.get(ref_model, val) is None:
            errors[k] = f"{ref_model.__name__} {val} does not exist"
            continue

        patch[k] = val

    if not partial:
        for k in sorted(policy.required_on_create):
            if k not in errors and patch.get(k) is None:
                errors[k] = "is required"

    if errors:
        raise ValidationError("Validation failed", errors)

    return patch


def json_object(payload: Any) -> dict:
    """Request body as a dict. A missing body is empty; arrays and scalars are rejected."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload", {"_": "expected a JSON object"})
    return payload


def require_fields(payload: dict, names) -> dict[str, str]:
    """Field -> 'is required' for every name missing or blank in payload."""
    missing = {}
    for name in names:
        value = payload.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing[name] = "is required"
    return missing


def coerce_filter_value(model: DeclarativeMeta, name: str, raw: Any):
    """Coerce a query-string value for an equality filter on `name`."""
    col = _columns_by_key(model)[name]
    try:
        return _coerce_value(col, raw)
    except ValueError as exc:
        raise ValidationError("Validation failed", {name: str(exc)}) from None
