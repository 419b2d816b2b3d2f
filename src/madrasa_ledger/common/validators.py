from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

CENT = Decimal("0.01")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def to_money(value: Any, field_name: str = "Amount") -> Decimal:
    """Convert user or driver input to a 2-place Decimal.

    Floats go through ``str`` first so 0.1 stays 0.10 instead of the binary
    expansion.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is not a number")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value if value not in (None, "") else "0")
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def require_positive_amount(value: Any, field_name: str = "Amount") -> Decimal:
    amount = to_money(value, field_name)
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return amount


def require_non_negative_amount(value: Any, field_name: str = "Amount") -> Decimal:
    amount = to_money(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
