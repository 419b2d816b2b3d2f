from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import Role, SubjectKind
from ..core.exceptions import AuthorizationError
from ..store.snapshot import Snapshot
from .model import SessionUser


@dataclass(frozen=True)
class AccessScope:
    """Which rows a logged-in user may see or write.

    Admin sees everything. A teacher sees the courses they teach, the
    students of those courses, that attendance and their own salary. A
    substitute works on the covered teacher's courses and sees no finance.
    """

    role: Role
    teacher_id: Optional[str]
    course_ids: frozenset[str]
    student_ids: frozenset[str]

    @classmethod
    def for_user(cls, user: SessionUser, snapshot: Snapshot) -> "AccessScope":
        if user.role == Role.ADMIN:
            return cls(Role.ADMIN, None, frozenset(), frozenset())

        acting_for = user.covers_teacher_id if user.role == Role.SUBSTITUTE else user.teacher_id
        course_ids = frozenset(c.course_id for c in snapshot.courses if acting_for and c.teacher_id == acting_for)
        student_ids = frozenset(s.student_id for s in snapshot.students if s.course_id in course_ids)
        return cls(user.role, acting_for, course_ids, student_ids)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_see_course(self, course_id: Optional[str]) -> bool:
        return self.is_admin or course_id in self.course_ids

    def can_see_student(self, student_id: Optional[str]) -> bool:
        return self.is_admin or student_id in self.student_ids

    def can_see_attendance(self, record: AttendanceRecord) -> bool:
        if self.is_admin:
            return True
        if record.subject_kind == SubjectKind.STAFF:
            return self.role == Role.TEACHER and record.subject_id == self.teacher_id
        return record.subject_id in self.student_ids

    def can_see_fees(self) -> bool:
        return self.is_admin

    def can_see_salary(self, teacher_id: Optional[str]) -> bool:
        return self.is_admin or (self.role == Role.TEACHER and teacher_id == self.teacher_id)

    def filter_attendance(self, records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
        return [r for r in records if self.can_see_attendance(r)]

    def require_can_mark(self, subject_kind: SubjectKind, subject_id: Optional[str]) -> None:
        """Only the director marks staff; teachers and substitutes mark their own students."""
        if self.is_admin:
            return
        if subject_kind == SubjectKind.STAFF or subject_id not in self.student_ids:
            raise AuthorizationError(f"Not allowed to mark attendance for {subject_id}")
