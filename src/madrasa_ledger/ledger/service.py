from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import now_local, parse_iso_date, parse_period
from ..common.locks import KeyedLocks
from ..common.receipts import ReceiptNumberGenerator, new_record_id
from ..common.validators import optional_text, parse_enum, require_positive_amount
from ..core.constants import FEE_RECEIPT_PREFIX, SALARY_RECEIPT_PREFIX
from ..core.enums import FeePaymentMode, LedgerKind, SalaryPaymentMode
from ..core.exceptions import NotFoundError, ValidationError
from ..periods.guard import PeriodLockGuard
from ..store.entity_store import EntityStore
from .calculator.base import LedgerCalculator, Subject
from .calculator.standard_calculator import ZERO, StandardLedgerCalculator, subject_id_of
from .model import DateRangeWindow, LedgerTransaction, LedgerWindow, MonthWindow, Settlement
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

_RECEIPT_PREFIX = {LedgerKind.FEE: FEE_RECEIPT_PREFIX, LedgerKind.SALARY: SALARY_RECEIPT_PREFIX}
_MODES = {LedgerKind.FEE: FeePaymentMode, LedgerKind.SALARY: SalaryPaymentMode}


def make_window(
    *,
    period_month: Optional[str] = None,
    start: Any = None,
    end: Any = None,
) -> LedgerWindow:
    """Build exactly one kind of window from query parameters."""
    has_range = start is not None or end is not None
    if period_month and has_range:
        raise ValidationError("Use either a billing month or a date range, not both")
    if period_month:
        return MonthWindow(parse_period(period_month))
    if not has_range:
        raise ValidationError("A billing month or a date range is required")
    if start is None or end is None:
        raise ValidationError("A date range needs both a start and an end date")
    window = DateRangeWindow(parse_iso_date(start, "Start date"), parse_iso_date(end, "End date"))
    if window.end < window.start:
        raise ValidationError("End date must not be before start date")
    return window


class LedgerService:
    """Fee collection and payroll over the append-only transaction ledger."""

    def __init__(
        self,
        store: EntityStore,
        ledger: LedgerRepository,
        guard: PeriodLockGuard,
        *,
        calculator: Optional[LedgerCalculator] = None,
        receipts: Optional[ReceiptNumberGenerator] = None,
        clock=now_local,
    ):
        self._store = store
        self._ledger = ledger
        self._guard = guard
        self._calculator = calculator or StandardLedgerCalculator()
        self._receipts = receipts or ReceiptNumberGenerator()
        self._clock = clock
        self._locks = KeyedLocks()

    @property
    def calculator(self) -> LedgerCalculator:
        return self._calculator

    def _subject(self, kind: LedgerKind, subject_id: str) -> Subject:
        if kind == LedgerKind.FEE:
            return self._store.student(subject_id)
        return self._store.teacher(subject_id)

    def post_transaction(
        self,
        kind: LedgerKind,
        subject_id: str,
        period_month: str,
        amount: Any,
        payment_mode: Any,
        *,
        transaction_date: Any = None,
        reference: Optional[str] = None,
    ) -> LedgerTransaction:
        kind = parse_enum(LedgerKind, kind, "Ledger kind")
        sid = optional_text(subject_id)
        if not sid:
            raise ValidationError("Subject id is required")
        period = parse_period(period_month)
        value = require_positive_amount(amount)
        mode = parse_enum(_MODES[kind], payment_mode, "Payment mode")
        paid_on = parse_iso_date(transaction_date, "Payment date") if transaction_date else self._clock().date()
        subject = self._subject(kind, sid)

        # Month first, then subject: the same order everywhere, and a close
        # waits until this post is appended.
        with self._guard.hold(period), self._locks.hold((kind, sid, period)):
            self._guard.ensure_open(period)

            window = MonthWindow(period)
            before = self._calculator.cumulative_paid(self._store.snapshot.transactions, kind, sid, window)
            total = before + value
            status = self._calculator.settlement_status(total, self._calculator.obligation_for(subject), kind)

            txn = LedgerTransaction(
                transaction_id=new_record_id("PAY" if kind == LedgerKind.FEE else "SALPAY"),
                kind=kind,
                subject_id=sid,
                amount=value,
                transaction_date=paid_on,
                period_month=period,
                payment_mode=mode.value,
                receipt_no=self._receipts.next(_RECEIPT_PREFIX[kind]),
                resulting_status=status,
                reference=optional_text(reference),
            )
            self._ledger.append(txn)
            self._store.apply(lambda s: s.with_transaction(txn))

        logger.info(
            "%s %s posted for %s/%s: %s (cumulative %s, %s)",
            kind.value,
            txn.receipt_no,
            sid,
            period,
            value,
            total,
            status.value,
        )
        return txn

    def settle(self, kind: LedgerKind, subject_id: str, window: LedgerWindow) -> Settlement:
        kind = parse_enum(LedgerKind, kind, "Ledger kind")
        subject = self._subject(kind, subject_id)
        return self._calculator.settle(subject, self._store.snapshot.transactions, window)

    def settle_all(self, kind: LedgerKind, window: LedgerWindow) -> list[Settlement]:
        """Settlement of every subject of ``kind``.

        Month windows cover every active subject plus anyone who was paid in
        that month. Date ranges only list subjects with transactions in range.
        """
        kind = parse_enum(LedgerKind, kind, "Ledger kind")
        snap = self._store.snapshot
        subjects = snap.students if kind == LedgerKind.FEE else snap.teachers
        txns = snap.transactions

        if isinstance(window, MonthWindow):
            paid_ids = {t.subject_id for t in txns if t.kind == kind and t.period_month == window.period_month}
            chosen = [s for s in subjects if s.is_active or subject_id_of(s) in paid_ids]
        else:
            paid_ids = {
                t.subject_id for t in txns if t.kind == kind and window.start <= t.transaction_date <= window.end
            }
            chosen = [s for s in subjects if subject_id_of(s) in paid_ids]

        return [self._calculator.settle(s, txns, window) for s in chosen]

    def find_receipt(self, receipt_no: str) -> LedgerTransaction:
        wanted = (receipt_no or "").strip()
        for txn in self._store.snapshot.transactions:
            if txn.receipt_no == wanted:
                return txn
        raise NotFoundError(f"Receipt {wanted} not found")

    def suggested_payment(self, kind: LedgerKind, subject_id: str, period_month: str) -> Decimal:
        """Remaining balance for the month, floored at zero, to pre-fill payment forms."""
        settlement = self.settle(kind, subject_id, MonthWindow(parse_period(period_month)))
        return max(settlement.balance, ZERO)

    def transactions_for(self, kind: LedgerKind, *, subject_id: Optional[str] = None) -> list[LedgerTransaction]:
        rows = [
            t
            for t in self._store.snapshot.transactions
            if t.kind == kind and (subject_id is None or t.subject_id == subject_id)
        ]
        return sorted(rows, key=lambda t: t.receipt_no, reverse=True)

