from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MonthlyLock:
    """Open/closed state of a billing month. ``closed_at`` is set iff closed."""

    period_month: str
    is_closed: bool
    closed_by: Optional[str] = None
    closed_at: Optional[datetime] = None

    @classmethod
    def open(cls, period_month: str) -> "MonthlyLock":
        return cls(period_month=period_month, is_closed=False)
