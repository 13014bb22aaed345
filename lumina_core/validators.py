"""Validation helpers shared by the Lumina front ends and services."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

from .catalog import CURRENCY_CODES
from .exceptions import ValidationError

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a non-negative Decimal with exactly two fraction digits."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")

    return _quantize_two_decimals(amount)


def coerce_amount(raw: object, default: Decimal = Decimal("0.00")) -> Decimal:
    """Lenient numeric parse: anything unparseable becomes ``default``.

    Used for the budget and initial balance inputs, where a bad entry
    means "zero" rather than an error. Negative values are kept, since an
    opening balance may be in debt.
    """
    if raw is None or isinstance(raw, bool):
        return default
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError, ValueError):
        return default
    if not amount.is_finite():
        return default
    return _quantize_two_decimals(amount)


def validate_currency(code: object) -> str:
    if not isinstance(code, str):
        raise ValidationError("currency must be a string")
    canonical = code.strip().upper()
    if canonical not in CURRENCY_CODES:
        raise ValidationError(f"currency must be one of: {', '.join(CURRENCY_CODES)}")
    return canonical


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return validate_required_str(value, field, max_length)


def validate_datetime(value: object, field: str) -> datetime:
    """Accept datetimes, dates and ISO strings and return a UTC datetime.

    Anything without an offset is local wall-clock time: bare dates mean
    local midnight, naive datetimes are local too.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text[:-1] + "+00:00" if text.endswith("Z") else text)
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO 8601 date or datetime") from exc
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time())
    else:
        raise ValidationError(f"{field} must be a datetime or ISO 8601 string")
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc)


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ValidationError(f"{field} must be a boolean")
