from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import parse_iso_date, period_of
from ..common.locks import KeyedLocks
from ..common.validators import optional_text, parse_enum
from ..core.enums import AttendanceStatus, Role, SubjectKind
from ..core.exceptions import NotFoundError, ValidationError
from ..periods.guard import PeriodLockGuard
from ..store.entity_store import EntityStore
from .model import (
    AttendanceFilter,
    AttendanceInput,
    AttendanceKey,
    AttendanceRecord,
    AttendanceSummary,
    BatchResult,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Resolved:
    kind: SubjectKind
    subject_id: str
    day: date
    status: AttendanceStatus
    remarks: str
    course_id: Optional[str]
    teacher_id: Optional[str]

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(self.kind, self.subject_id, self.day)


class AttendanceReconciler:
    """Daily register: one authoritative mark per (kind, subject, date).

    A later mark for the same key fully overwrites the earlier one.
    """

    def __init__(
        self,
        store: EntityStore,
        attendance: AttendanceRepository,
        guard: PeriodLockGuard,
        *,
        key_locks: Optional[KeyedLocks] = None,
    ):
        self._store = store
        self._attendance = attendance
        self._guard = guard
        self._locks = key_locks or KeyedLocks()

    def _resolve(self, item: AttendanceInput) -> _Resolved:
        kind = parse_enum(SubjectKind, item.subject_kind, "Subject kind")
        subject_id = optional_text(item.subject_id)
        if not subject_id:
            raise ValidationError("Subject id is required")

        day = parse_iso_date(item.attendance_date)
        status = parse_enum(AttendanceStatus, item.status, "Status")
        remarks = optional_text(item.remarks) or ""

        if kind == SubjectKind.STAFF:
            self._store.teacher(subject_id)
            return _Resolved(kind, subject_id, day, status, remarks, None, subject_id)

        student = self._store.student(subject_id)
        given_course = optional_text(item.course_id)
        if given_course:
            course = self._store.course(given_course)
        else:
            # The student's course may have been deleted since; mark without one.
            course = self._store.snapshot.course(student.course_id)
        if course is None:
            return _Resolved(kind, subject_id, day, status, remarks, None, None)
        return _Resolved(kind, subject_id, day, status, remarks, course.course_id, course.teacher_id)

    def submit_batch(
        self,
        inputs: Iterable[AttendanceInput],
        *,
        recorded_by_role: Role,
        authorize: Optional[Callable[[SubjectKind, str], None]] = None,
    ) -> BatchResult:
        """Validate everything, then upsert every row or none.

        Raises ``ValidationError`` listing every failing index, ``PeriodLocked``
        when any row falls in a closed month. ``authorize`` is called for each
        valid row once the whole batch has validated.
        """
        items = list(inputs)
        if not items:
            raise ValidationError("Attendance batch is empty")
        role = parse_enum(Role, recorded_by_role, "Role")

        resolved: list[_Resolved] = []
        errors: list[dict] = []
        for i, item in enumerate(items):
            try:
                resolved.append(self._resolve(item))
            except (ValidationError, NotFoundError) as e:
                errors.append({"index": i, "subjectId": item.subject_id, "error": str(e)})
        if errors:
            logger.warning("Attendance batch rejected: %d of %d rows invalid", len(errors), len(items))
            raise ValidationError(f"{len(errors)} attendance row(s) are invalid", errors=errors)

        if authorize is not None:
            for r in resolved:
                authorize(r.kind, r.subject_id)

        # Later rows for the same key win.
        latest: dict[AttendanceKey, _Resolved] = {}
        for r in resolved:
            latest.pop(r.key, None)
            latest[r.key] = r

        periods = sorted({period_of(r.day) for r in resolved})
        with self._guard.hold(*periods), self._locks.hold_many(latest.keys()):
            for period in periods:
                self._guard.ensure_open(period)

            snap = self._store.snapshot
            pending = []
            inserted = updated = 0
            for key, r in latest.items():
                existing = snap.attendance_for(key)
                if existing:
                    updated += 1
                else:
                    inserted += 1
                pending.append(
                    AttendanceRecord(
                        attendance_id=existing.attendance_id if existing else None,
                        subject_kind=r.kind,
                        subject_id=r.subject_id,
                        attendance_date=r.day,
                        status=r.status,
                        recorded_by_role=role,
                        remarks=r.remarks,
                        course_id=r.course_id,
                        teacher_id=r.teacher_id,
                    )
                )

            saved = tuple(self._attendance.upsert_many(pending))
            self._store.apply(lambda s: s.with_attendance(saved))

        logger.info("Attendance saved by %s: %d inserted, %d updated", role.value, inserted, updated)
        return BatchResult(inserted=inserted, updated=updated, records=saved)

    def present(self, subject_kind: SubjectKind, subject_id: str, attendance_date) -> AttendanceRecord:
        kind = parse_enum(SubjectKind, subject_kind, "Subject kind")
        day = parse_iso_date(attendance_date)
        record = self._store.attendance_for(AttendanceKey(kind, str(subject_id), day))
        if not record:
            raise NotFoundError(f"No {kind.value.lower()} attendance for {subject_id} on {day.isoformat()}")
        return record

    def history(self, flt: Optional[AttendanceFilter] = None) -> list[AttendanceRecord]:
        """Matching records, newest date first; same-date rows keep insertion order."""
        flt = flt or AttendanceFilter()
        rows = [r for r in self._store.snapshot.attendance if flt.matches(r)]
        # sorted() is stable, so reverse=True keeps insertion order among equal dates
        return sorted(rows, key=lambda r: r.attendance_date, reverse=True)

    def summary(
        self,
        flt: Optional[AttendanceFilter] = None,
        *,
        records: Optional[Iterable[AttendanceRecord]] = None,
    ) -> AttendanceSummary:
        """Counts per status over history(flt), or over ``records`` when already selected."""
        rows = self.history(flt) if records is None else records
        counts = Counter(r.status for r in rows)
        return AttendanceSummary(
            present=counts.get(AttendanceStatus.PRESENT, 0),
            absent=counts.get(AttendanceStatus.ABSENT, 0),
            late=counts.get(AttendanceStatus.LATE, 0),
        )
