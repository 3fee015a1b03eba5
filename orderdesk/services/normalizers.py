from __future__ import annotations

import math
import re
from typing import Any

from orderdesk.core.errors import FieldError, ShapeError
from orderdesk.schemas.records import ORDER_STATUSES

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)

_MISSING = object()


def ensure_mapping(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ShapeError("Invalid body")
    return payload


def sanitize_string(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_string(value: Any, *, field: str, required: bool = False) -> str | None:
    text = sanitize_string(value)
    if not text:
        if required:
            raise FieldError(field, f"Missing: {field}")
        return None
    return text


def normalize_email(value: Any, *, required: bool = False) -> str | None:
    email = sanitize_string(value).lower()
    if not email:
        if required:
            raise FieldError("email", "Missing: email")
        return None
    if not EMAIL_REGEX.match(email):
        raise FieldError("email", "Invalid email format")
    return email


def normalize_sku(value: Any, *, required: bool = False, field: str = "sku") -> str | None:
    sku = sanitize_string(value).upper()
    if not sku:
        if required:
            raise FieldError(field, f"Missing: {field}")
        return None
    return sku


def normalize_amount(value: Any, *, field: str, required: bool = False) -> float | None:
    """Price-like amounts: finite and non-negative."""
    if value is None:
        if required:
            raise FieldError(field, f"Missing: {field}")
        return None

    invalid = FieldError(field, f"Invalid: {field} must be a positive number")
    if isinstance(value, bool):
        raise invalid
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        raise invalid from None
    if not math.isfinite(amount) or amount < 0:
        raise invalid
    return amount


def normalize_quantity(value: Any) -> int | None:
    """Positive whole numbers; ``None`` when the value is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or not number.is_integer() or number <= 0:
        return None
    return int(number)


def normalize_boolean(
    value: Any,
    *,
    field: str = "active",
    required: bool = False,
    default: Any = _MISSING,
) -> bool | None:
    if value is None:
        if required:
            raise FieldError(field, "Missing boolean value")
        return None if default is _MISSING else default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized == "true":
            return True
        if normalized == "false":
            return False
    raise FieldError(field, f"Invalid: {field} must be a boolean value")


def normalize_status(value: Any, *, required: bool = False) -> str | None:
    if value is None:
        if required:
            raise FieldError("status", "Missing: status")
        return None
    status = sanitize_string(value).upper()
    if not status:
        raise FieldError("status", "Missing: status")
    if status not in ORDER_STATUSES:
        raise FieldError("status", f"Invalid status. Allowed: {', '.join(ORDER_STATUSES)}")
    return status


def normalize_optional_text(value: Any, *, field: str) -> str | None:
    """Nullable free text: ``None``, absent and blank all mean "no value"."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise FieldError(field, f"Invalid: {field} must be a string")
    return value.strip() or None
