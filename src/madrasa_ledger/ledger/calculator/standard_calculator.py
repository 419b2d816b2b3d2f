from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ...common.validators import CENT
from ...core.enums import LedgerKind, SettlementStatus
from ...students.model import Student
from ...teachers.model import Teacher
from ..model import DateRangeWindow, LedgerTransaction, LedgerWindow, MonthWindow, Settlement
from .base import LedgerCalculator, Subject

ZERO = Decimal("0.00")


def kind_of(subject: Subject) -> LedgerKind:
    if isinstance(subject, Student):
        return LedgerKind.FEE
    if isinstance(subject, Teacher):
        return LedgerKind.SALARY
    raise TypeError(f"Not a ledger subject: {type(subject).__name__}")


def subject_id_of(subject: Subject) -> str:
    return subject.student_id if isinstance(subject, Student) else subject.teacher_id


def in_window(txn: LedgerTransaction, window: LedgerWindow) -> bool:
    """Month windows match the billing period, date ranges the payment date."""
    if isinstance(window, MonthWindow):
        return txn.period_month == window.period_month
    if isinstance(window, DateRangeWindow):
        return window.start <= txn.transaction_date <= window.end
    raise TypeError(f"Unknown ledger window: {type(window).__name__}")


class StandardLedgerCalculator(LedgerCalculator):
    """Standard rule: balance = obligation - paid, signed, never clamped.

    Paid iff paid >= obligation (a zero obligation is always Paid), Partial
    iff 0 < paid < obligation, otherwise Due (fees) or Pending (salary).
    """

    def obligation_for(self, subject: Subject) -> Decimal:
        if isinstance(subject, Student):
            amount = subject.fee_structure.total_fee
        else:
            kind_of(subject)
            amount = subject.salary_amount
        return Decimal(amount).quantize(CENT)

    def cumulative_paid(
        self,
        transactions: Iterable[LedgerTransaction],
        kind: LedgerKind,
        subject_id: str,
        window: LedgerWindow,
    ) -> Decimal:
        total = ZERO
        for txn in transactions:
            if txn.kind == kind and txn.subject_id == subject_id and in_window(txn, window):
                total += txn.amount
        return total.quantize(CENT)

    def settlement_status(self, paid: Decimal, obligation: Decimal, kind: LedgerKind) -> SettlementStatus:
        if paid >= obligation:
            return SettlementStatus.PAID
        if paid > 0:
            return SettlementStatus.PARTIAL
        return SettlementStatus.PENDING if kind == LedgerKind.SALARY else SettlementStatus.DUE

    def settle(
        self,
        subject: Subject,
        transactions: Iterable[LedgerTransaction],
        window: LedgerWindow,
    ) -> Settlement:
        kind = kind_of(subject)
        sid = subject_id_of(subject)
        matched = [
            t for t in transactions if t.kind == kind and t.subject_id == sid and in_window(t, window)
        ]
        paid = sum((t.amount for t in matched), ZERO).quantize(CENT)
        obligation = self.obligation_for(subject)

        modes: list[str] = []
        for t in matched:
            if t.payment_mode not in modes:
                modes.append(t.payment_mode)

        return Settlement(
            subject_id=sid,
            kind=kind,
            period=window.label,
            obligation=obligation,
            paid=paid,
            balance=obligation - paid,
            status=self.settlement_status(paid, obligation, kind),
            receipts=tuple(t.receipt_no for t in matched),
            payment_modes=tuple(modes),
            last_payment_date=max((t.transaction_date for t in matched), default=None),
        )
