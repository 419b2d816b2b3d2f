from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from ..core.enums import LedgerKind, SettlementStatus


@dataclass(frozen=True)
class LedgerTransaction:
    """Domain entity: one fee or salary payment.

    ``period_month`` is the billing month the payment is credited against and
    is independent of ``transaction_date``. ``resulting_status`` reflects the
    cumulative total for (subject, period) at posting time.
    """

    transaction_id: str
    kind: LedgerKind
    subject_id: str
    amount: Decimal
    transaction_date: date
    period_month: str
    payment_mode: str
    receipt_no: str
    resulting_status: SettlementStatus
    reference: Optional[str] = None


@dataclass(frozen=True)
class MonthWindow:
    """Aggregate on the billing period."""

    period_month: str

    @property
    def label(self) -> str:
        return self.period_month


@dataclass(frozen=True)
class DateRangeWindow:
    """Aggregate on the transaction date, both ends inclusive."""

    start: date
    end: date

    @property
    def label(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


LedgerWindow = Union[MonthWindow, DateRangeWindow]


@dataclass(frozen=True)
class Settlement:
    subject_id: str
    kind: LedgerKind
    period: str
    obligation: Decimal
    paid: Decimal
    balance: Decimal
    status: SettlementStatus
    receipts: tuple[str, ...] = ()
    payment_modes: tuple[str, ...] = ()
    last_payment_date: Optional[date] = None

    @property
    def is_settled(self) -> bool:
        return self.balance <= 0

    @property
    def balance_label(self) -> str:
        """Display clamp; the numeric ``balance`` stays signed."""
        if self.is_settled:
            return "Paid Full"
        return f"{self.balance:.2f}"
