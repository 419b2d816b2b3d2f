from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceFilter
from ..attendance.service import AttendanceReconciler
from ..common.datetime_utils import format_date, parse_period
from ..core.enums import LedgerKind, SettlementStatus, SubjectKind
from ..ledger.model import LedgerWindow, MonthWindow, Settlement
from ..ledger.service import LedgerService
from ..store.entity_store import EntityStore

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict


@dataclass(frozen=True)
class DashboardStats:
    period_month: str
    active_students: int
    courses: int
    teachers: int
    revenue: Decimal
    payroll_paid: Decimal
    students_not_paid: int


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


class ReportService:
    """Report rows are built only from settle()/history() output.

    Nothing here recomputes a status or a balance, so exported figures
    always match what the screens show.
    """

    def __init__(self, store: EntityStore, ledger: LedgerService, attendance: AttendanceReconciler):
        self._store = store
        self._ledger = ledger
        self._attendance = attendance

    def _settlement_row(self, s: Settlement, name: str, extra: dict) -> dict:
        return {
            "id": s.subject_id,
            "name": name,
            **extra,
            "period": s.period,
            "obligation": _money(s.obligation),
            "paid": _money(s.paid),
            "balance": _money(s.balance),
            "balance_label": s.balance_label,
            "status": s.status.value,
            "payment_modes": ", ".join(s.payment_modes),
            "receipts": ", ".join(s.receipts),
            "last_payment_date": format_date(s.last_payment_date) if s.last_payment_date else "",
        }

    def _summary(self, settlements: list[Settlement]) -> dict:
        counts = {status.value: 0 for status in SettlementStatus}
        for s in settlements:
            counts[s.status.value] += 1
        return {
            "subjects": len(settlements),
            "total_obligation": _money(sum((s.obligation for s in settlements), ZERO)),
            "total_paid": _money(sum((s.paid for s in settlements), ZERO)),
            "total_balance": _money(sum((s.balance for s in settlements), ZERO)),
            "by_status": counts,
        }

    def fee_report(self, window: LedgerWindow) -> ReportData:
        snap = self._store.snapshot
        settlements = self._ledger.settle_all(LedgerKind.FEE, window)
        rows = []
        for s in settlements:
            student = snap.student(s.subject_id)
            course = snap.course(student.course_id) if student else None
            rows.append(
                self._settlement_row(
                    s,
                    student.full_name if student else "",
                    {"course": course.name if course else "", "parent_phone": (student.parent_phone or "") if student else ""},
                )
            )
        return ReportData(rows=rows, summary=self._summary(settlements))

    def payroll_report(self, window: LedgerWindow, *, teacher_id: Optional[str] = None) -> ReportData:
        snap = self._store.snapshot
        settlements = self._ledger.settle_all(LedgerKind.SALARY, window)
        if teacher_id is not None:
            settlements = [s for s in settlements if s.subject_id == teacher_id]
        rows = []
        for s in settlements:
            teacher = snap.teacher(s.subject_id)
            rows.append(
                self._settlement_row(
                    s,
                    teacher.full_name if teacher else "",
                    {"salary_type": teacher.salary_type.value if teacher else ""},
                )
            )
        return ReportData(rows=rows, summary=self._summary(settlements))

    def attendance_register(self, flt: Optional[AttendanceFilter] = None, *, records=None) -> ReportData:
        """Rows straight from history(); pass ``records`` to export an already scoped list."""
        snap = self._store.snapshot
        history = self._attendance.history(flt) if records is None else records
        rows = []
        for r in history:
            if r.subject_kind == SubjectKind.STAFF:
                person = snap.teacher(r.subject_id)
            else:
                person = snap.student(r.subject_id)
            course = snap.course(r.course_id)
            rows.append(
                {
                    "date": format_date(r.attendance_date),
                    "kind": r.subject_kind.value,
                    "id": r.subject_id,
                    "name": person.full_name if person else "",
                    "course": course.name if course else "",
                    "status": r.status.value,
                    "remarks": r.remarks,
                    "marked_by": r.recorded_by_role.value,
                }
            )

        by_status: dict[str, int] = {}
        for row in rows:
            by_status[row["status"]] = by_status.get(row["status"], 0) + 1
        return ReportData(rows=rows, summary={"records": len(rows), "by_status": by_status})

    def dashboard(self, period_month: str) -> DashboardStats:
        period = parse_period(period_month)
        window = MonthWindow(period)
        snap = self._store.snapshot

        fees = self._ledger.settle_all(LedgerKind.FEE, window)
        salaries = self._ledger.settle_all(LedgerKind.SALARY, window)
        active_ids = {s.student_id for s in snap.students if s.is_active}

        return DashboardStats(
            period_month=period,
            active_students=len(active_ids),
            courses=len(snap.courses),
            teachers=len(snap.teachers),
            revenue=sum((s.paid for s in fees), ZERO),
            payroll_paid=sum((s.paid for s in salaries), ZERO),
            students_not_paid=sum(
                1 for s in fees if s.subject_id in active_ids and s.status != SettlementStatus.PAID
            ),
        )
