"""
Payload validation tests against the resource write policies.
"""

import pytest

from bitumen.services.resources import get_resource
from bitumen.validation import ValidationError, validate_payload


def validate(name, payload, partial=False):
    spec = get_resource(name)
    return validate_payload(model=spec.model, payload=payload, policy=spec.policy, partial=partial)


class TestValidatePayload:
    def test_cleans_and_coerces(self, db_session):
        patch = validate("clients", {"name": " Ring Road Co ", "category": "delta", "payment_terms": " 60 "})
        assert patch == {"name": "Ring Road Co", "category": "DELTA", "payment_terms": 60}

    def test_required_on_create_only(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            validate("clients", {})
        assert exc_info.value.fields == {"category": "is required", "name": "is required"}
        assert validate("clients", {}, partial=True) == {}

    def test_not_a_dict(self, db_session):
        with pytest.raises(ValidationError):
            validate("clients", ["name"])

    def test_server_fields_are_not_writable(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            validate("clients", {"id": 5, "created_at": "2024-01-01", "last_synced": None}, partial=True)
        assert set(exc_info.value.fields) == {"id", "created_at", "last_synced"}

    @pytest.mark.parametrize("raw,message", [
        ("1.5", "must be an integer (no decimals)"),
        ("1e3", "must be a plain integer (scientific notation not allowed)"),
        (2.0, "must be an integer, not a decimal"),
        ("ten", "must be an integer"),
    ])
    def test_integer_rules(self, db_session, raw, message):
        with pytest.raises(ValidationError) as exc_info:
            validate("clients", {"payment_terms": raw}, partial=True)
        assert exc_info.value.fields["payment_terms"] == message

    def test_blank_integer_is_null(self, db_session):
        assert validate("clients", {"payment_terms": ""}, partial=True) == {"payment_terms": None}

    def test_blank_choice_is_null(self, db_session):
        assert validate("clients", {"company_type": ""}, partial=True) == {"company_type": None}

    def test_string_length(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            validate("clients", {"pan_number": "X" * 11}, partial=True)
        assert exc_info.value.fields["pan_number"] == "exceeds max length 10"

    def test_negative_amount(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            validate("orders", {"amount": "-1"}, partial=True)
        assert exc_info.value.fields["amount"] == "must be >= 0"

    def test_to_dict_shape(self):
        err = ValidationError("Validation failed", {"name": "is required"})
        assert err.to_dict() == {"error": "Validation failed", "fields": {"name": "is required"}}
        assert ValidationError("Bad input").to_dict() == {"error": "Validation failed", "fields": {"_": "Bad input"}}
