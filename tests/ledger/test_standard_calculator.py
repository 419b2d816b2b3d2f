from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from madrasa_ledger.core.enums import LedgerKind, SettlementStatus
from madrasa_ledger.ledger.calculator.standard_calculator import StandardLedgerCalculator
from madrasa_ledger.ledger.model import DateRangeWindow, LedgerTransaction, MonthWindow
from madrasa_ledger.students.model import FeeStructure, Student
from madrasa_ledger.teachers.model import Teacher


def _txn(n: int, subject_id: str, amount: str, period: str, paid_on: date, kind=LedgerKind.FEE) -> LedgerTransaction:
    return LedgerTransaction(
        transaction_id=f"PAY-{n}",
        kind=kind,
        subject_id=subject_id,
        amount=Decimal(amount),
        transaction_date=paid_on,
        period_month=period,
        payment_mode="Cash",
        receipt_no=f"REC-{n:04d}",
        resulting_status=SettlementStatus.PARTIAL,
    )


def _student(fee: str) -> Student:
    return Student("S-1", "Abdullah", "C-1", FeeStructure(total_fee=Decimal(fee)))


@pytest.mark.parametrize(
    "paid, obligation, kind, expected",
    [
        ("0.00", "5000.00", LedgerKind.FEE, SettlementStatus.DUE),
        ("0.00", "5000.00", LedgerKind.SALARY, SettlementStatus.PENDING),
        ("0.01", "5000.00", LedgerKind.FEE, SettlementStatus.PARTIAL),
        ("4999.99", "5000.00", LedgerKind.SALARY, SettlementStatus.PARTIAL),
        ("5000.00", "5000.00", LedgerKind.FEE, SettlementStatus.PAID),
        ("5500.00", "5000.00", LedgerKind.FEE, SettlementStatus.PAID),
        ("0.00", "0.00", LedgerKind.FEE, SettlementStatus.PAID),
        ("0.00", "0.00", LedgerKind.SALARY, SettlementStatus.PAID),
    ],
)
def test_settlement_status_tri_state(paid, obligation, kind, expected):
    calc = StandardLedgerCalculator()
    assert calc.settlement_status(Decimal(paid), Decimal(obligation), kind) == expected


def test_obligation_for_student_and_teacher():
    calc = StandardLedgerCalculator()
    assert calc.obligation_for(_student("4500")) == Decimal("4500.00")
    assert calc.obligation_for(Teacher("T-1", "Ahmed", Decimal("12000.5"))) == Decimal("12000.50")


def test_month_window_uses_billing_period_not_payment_date():
    # Paid in July for June: counts toward June only.
    txns = [
        _txn(1, "S-1", "2000", "2025-06", date(2025, 7, 2)),
        _txn(2, "S-1", "1000", "2025-07", date(2025, 7, 3)),
    ]
    calc = StandardLedgerCalculator()
    assert calc.cumulative_paid(txns, LedgerKind.FEE, "S-1", MonthWindow("2025-06")) == Decimal("2000.00")
    assert calc.cumulative_paid(txns, LedgerKind.FEE, "S-1", MonthWindow("2025-07")) == Decimal("1000.00")


def test_date_range_window_uses_payment_date_inclusive():
    txns = [
        _txn(1, "S-1", "100", "2025-05", date(2025, 6, 1)),
        _txn(2, "S-1", "200", "2025-06", date(2025, 6, 30)),
        _txn(3, "S-1", "400", "2025-06", date(2025, 7, 1)),
    ]
    window = DateRangeWindow(date(2025, 6, 1), date(2025, 6, 30))
    calc = StandardLedgerCalculator()
    assert calc.cumulative_paid(txns, LedgerKind.FEE, "S-1", window) == Decimal("300.00")


def test_cumulative_paid_ignores_other_subjects_and_kinds():
    txns = [
        _txn(1, "S-1", "100", "2025-06", date(2025, 6, 1)),
        _txn(2, "S-2", "200", "2025-06", date(2025, 6, 1)),
        _txn(3, "S-1", "400", "2025-06", date(2025, 6, 1), kind=LedgerKind.SALARY),
    ]
    calc = StandardLedgerCalculator()
    assert calc.cumulative_paid(txns, LedgerKind.FEE, "S-1", MonthWindow("2025-06")) == Decimal("100.00")


def test_settle_keeps_negative_balance_on_overpayment():
    txns = [
        _txn(1, "S-1", "3000", "2025-06", date(2025, 6, 2)),
        _txn(2, "S-1", "2500", "2025-06", date(2025, 6, 9)),
    ]
    s = StandardLedgerCalculator().settle(_student("5000"), txns, MonthWindow("2025-06"))

    assert s.paid == Decimal("5500.00")
    assert s.balance == Decimal("-500.00")
    assert s.status == SettlementStatus.PAID
    assert s.balance_label == "Paid Full"
    assert s.receipts == ("REC-0001", "REC-0002")
    assert s.last_payment_date == date(2025, 6, 9)


def test_repeated_cent_payments_do_not_drift():
    txns = [_txn(i, "S-1", "0.10", "2025-06", date(2025, 6, 1)) for i in range(10)]
    s = StandardLedgerCalculator().settle(_student("1.00"), txns, MonthWindow("2025-06"))
    assert s.paid == Decimal("1.00")
    assert s.balance == Decimal("0.00")
    assert s.status == SettlementStatus.PAID
