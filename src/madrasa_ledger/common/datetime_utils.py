from __future__ import annotations

from datetime import date, datetime
from typing import Union

from ..core.constants import DATE_FORMAT, PERIOD_FORMAT
from ..core.exceptions import ValidationError

DateLike = Union[str, date]


def parse_iso_date(value: DateLike, field_name: str = "Date") -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid calendar date (YYYY-MM-DD): {value!r}")


def parse_period(value: str) -> str:
    """Validate and normalize a billing period ("YYYY-MM")."""
    try:
        return datetime.strptime(str(value).strip(), PERIOD_FORMAT).strftime(PERIOD_FORMAT)
    except (TypeError, ValueError):
        raise ValidationError(f"Period must be YYYY-MM: {value!r}")


def period_of(day: date) -> str:
    return day.strftime(PERIOD_FORMAT)


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now()
