from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from threadlog.time_utils import coerce_datetime


# Maximum amount: 9,999,999,999.99 (fits Numeric(12, 2))
MAX_AMOUNT = Decimal("9999999999.99")
CENTS = Decimal("0.01")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate voucher code)."""


def require_text(payload: dict, key: str, label: str | None = None) -> str:
    """Return the stripped string at `key` or raise if missing/blank."""
    value = payload.get(key)
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label or key} is required")
    return value.strip()


def optional_text(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    return value or None


def to_amount(value: Any, key: str = "amount", *, allow_negative: bool = False) -> Decimal:
    """
    Coerce a money-like value to a 2-place Decimal.

    Accepts int, float, Decimal and numeric strings. Rejects bools, NaN/inf
    and values beyond MAX_AMOUNT.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{key} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{key} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{key} must be a number")
    if not allow_negative and amount < 0:
        raise ValidationError(f"{key} cannot be negative")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{key} exceeds maximum allowed value")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_int(value: Any, key: str = "quantity") -> int:
    """Strict integer coercion; rejects floats, decimals and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def to_positive_int(value: Any, key: str = "quantity") -> int:
    number = to_int(value, key)
    if number <= 0:
        raise ValidationError(f"{key} must be greater than zero")
    return number


def one_of(value: Any, allowed: Iterable[str], key: str) -> str:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValidationError(f"{key} must be one of: {', '.join(allowed)}")
    return value


def to_datetime(value: Any, key: str = "date"):
    try:
        dt = coerce_datetime(value)
    except ValueError:
        raise ValidationError(f"{key} must be an ISO-8601 datetime")
    if dt is None:
        raise ValidationError(f"{key} is required")
    return dt
