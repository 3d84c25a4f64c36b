"""Serialization helpers shared by the model to_dict() methods."""
from __future__ import annotations


def money_str(value):
    # Decimals go out as strings so 0 stays "0.00" and nothing rounds through float
    return str(value) if value is not None else None


def iso_date(value):
    return value.isoformat() if value is not None else None
