"""Validation helpers shared across the ledger store and category registry."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .exceptions import ValidationError
from .models import parse_date

WHITESPACE_PATTERN = re.compile(r"\s+")

MAX_NOTE_LENGTH = 200
MAX_METHOD_LENGTH = 50
MAX_NAME_LENGTH = 50


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a finite, positive Decimal.

    Precision is left untouched; rounding to two places is a display concern.
    """
    if raw is None or isinstance(raw, bool):
        raise ValidationError(field, "must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(field, "must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(field, "must be a finite number")
    if amount <= 0:
        raise ValidationError(field, "must be greater than zero")
    return amount


def validate_date(value: object, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, "is required")
    if not isinstance(value, str):
        raise ValidationError(field, "must be a date or ISO 8601 string")
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ValidationError(field, "must be an ISO 8601 date (YYYY-MM-DD)") from exc


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(field, "cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    trimmed = value.strip()
    if len(trimmed) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")
    return trimmed


def normalize_category_id(name: str) -> str:
    """Derive a category id: lowercase, whitespace runs collapsed to '-'."""
    return WHITESPACE_PATTERN.sub("-", name.strip().lower())
