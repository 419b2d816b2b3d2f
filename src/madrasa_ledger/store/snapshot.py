from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

from ..attendance.model import AttendanceKey, AttendanceRecord
from ..courses.model import Course
from ..ledger.model import LedgerTransaction
from ..periods.model import MonthlyLock
from ..settings.model import SystemSettings
from ..students.model import Student
from ..teachers.model import Teacher


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of every entity collection at one point in time.

    ``with_*`` / ``without_*`` return a new snapshot; the store swaps the
    reference, so readers never see a half-applied change.
    """

    students: tuple[Student, ...] = ()
    teachers: tuple[Teacher, ...] = ()
    courses: tuple[Course, ...] = ()
    attendance: tuple[AttendanceRecord, ...] = ()
    transactions: tuple[LedgerTransaction, ...] = ()
    monthly_locks: tuple[MonthlyLock, ...] = ()
    settings: SystemSettings = field(default_factory=SystemSettings)
    loaded_at: Optional[datetime] = None

    _students_by_id: dict = field(init=False, repr=False, compare=False)
    _teachers_by_id: dict = field(init=False, repr=False, compare=False)
    _courses_by_id: dict = field(init=False, repr=False, compare=False)
    _attendance_by_key: dict = field(init=False, repr=False, compare=False)
    _locks_by_period: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_students_by_id", {s.student_id: s for s in self.students})
        object.__setattr__(self, "_teachers_by_id", {t.teacher_id: t for t in self.teachers})
        object.__setattr__(self, "_courses_by_id", {c.course_id: c for c in self.courses})
        object.__setattr__(self, "_attendance_by_key", {r.key: r for r in self.attendance})
        object.__setattr__(self, "_locks_by_period", {m.period_month: m for m in self.monthly_locks})

    # Lookups
    def student(self, student_id: Optional[str]) -> Optional[Student]:
        return self._students_by_id.get(student_id)

    def teacher(self, teacher_id: Optional[str]) -> Optional[Teacher]:
        return self._teachers_by_id.get(teacher_id)

    def course(self, course_id: Optional[str]) -> Optional[Course]:
        return self._courses_by_id.get(course_id)

    def attendance_for(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        return self._attendance_by_key.get(key)

    def lock_for(self, period_month: str) -> Optional[MonthlyLock]:
        return self._locks_by_period.get(period_month)

    # Patches
    def with_student(self, student: Student) -> "Snapshot":
        return replace(self, students=_upsert(self.students, student, lambda s: s.student_id))

    def without_student(self, student_id: str) -> "Snapshot":
        return replace(self, students=tuple(s for s in self.students if s.student_id != student_id))

    def with_teacher(self, teacher: Teacher) -> "Snapshot":
        return replace(self, teachers=_upsert(self.teachers, teacher, lambda t: t.teacher_id))

    def without_teacher(self, teacher_id: str) -> "Snapshot":
        return replace(self, teachers=tuple(t for t in self.teachers if t.teacher_id != teacher_id))

    def with_course(self, course: Course) -> "Snapshot":
        return replace(self, courses=_upsert(self.courses, course, lambda c: c.course_id))

    def without_course(self, course_id: str) -> "Snapshot":
        return replace(self, courses=tuple(c for c in self.courses if c.course_id != course_id))

    def with_attendance(self, records: Iterable[AttendanceRecord]) -> "Snapshot":
        rows = self.attendance
        for record in records:
            rows = _upsert(rows, record, lambda r: r.key)
        return replace(self, attendance=rows)

    def with_transaction(self, txn: LedgerTransaction) -> "Snapshot":
        return replace(self, transactions=self.transactions + (txn,))

    def with_lock(self, lock: MonthlyLock) -> "Snapshot":
        return replace(self, monthly_locks=_upsert(self.monthly_locks, lock, lambda m: m.period_month))

    def with_settings(self, settings: SystemSettings) -> "Snapshot":
        return replace(self, settings=settings)


def _upsert(items: tuple, item, key) -> tuple:
    """Replace the element with the same key in place, else append."""
    k = key(item)
    out = list(items)
    for i, existing in enumerate(out):
        if key(existing) == k:
            out[i] = item
            return tuple(out)
    out.append(item)
    return tuple(out)
