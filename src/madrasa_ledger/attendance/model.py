from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, NamedTuple, Optional

from ..core.constants import NO_STUDENT_SENTINEL, STAFF_COURSE_SENTINEL
from ..core.enums import AttendanceStatus, Role, SubjectKind

_KIND_VALUES = frozenset(k.value for k in SubjectKind)


class AttendanceKey(NamedTuple):
    """Natural key: at most one record exists per key."""

    subject_kind: SubjectKind
    subject_id: str
    attendance_date: date


def classify_subject_kind(
    *,
    kind_marker: Any = None,
    student_id: Optional[str] = None,
    course_id: Optional[str] = None,
) -> SubjectKind:
    """Decide whether a stored/legacy row is about a student or staff.

    A row is staff iff its marker says Staff, its course id is the ``STAFF``
    sentinel, or it carries no student id (null, empty or ``N/A``). All three
    are equivalent.
    """
    marker = kind_marker.value if isinstance(kind_marker, SubjectKind) else kind_marker
    if marker == SubjectKind.STAFF.value:
        return SubjectKind.STAFF
    if course_id == STAFF_COURSE_SENTINEL:
        return SubjectKind.STAFF
    if not student_id or str(student_id).strip() in ("", NO_STUDENT_SENTINEL):
        return SubjectKind.STAFF
    return SubjectKind.STUDENT


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance mark.

    ``teacher_id`` is the teacher of record: the staff member for staff rows,
    the course teacher for student rows.
    """

    attendance_id: Optional[int]
    subject_kind: SubjectKind
    subject_id: str
    attendance_date: date
    status: AttendanceStatus
    recorded_by_role: Role
    remarks: str = ""
    course_id: Optional[str] = None
    teacher_id: Optional[str] = None

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(self.subject_kind, self.subject_id, self.attendance_date)


@dataclass(frozen=True)
class AttendanceInput:
    """One line of a register submission, as received from the caller."""

    subject_kind: Any
    subject_id: Any
    attendance_date: Any
    status: Any
    remarks: Optional[str] = None
    course_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "AttendanceInput":
        """Accept both the tagged shape and the legacy sentinel shape.

        Legacy rows use ``studentId="N/A"`` / ``courseId="STAFF"`` for staff
        and ``teacherId`` as the staff member's id. An unrecognised
        ``subjectKind`` is kept as given so validation reports it.
        """
        student_id = payload.get("studentId") or payload.get("student_id")
        course_id = payload.get("courseId") or payload.get("course_id")
        marker = payload.get("subjectKind") or payload.get("subject_kind")
        if marker is not None and (not isinstance(marker, str) or marker not in _KIND_VALUES):
            return cls(
                subject_kind=marker,
                subject_id=payload.get("subjectId") or payload.get("subject_id") or student_id,
                attendance_date=payload.get("date") or payload.get("attendance_date"),
                status=payload.get("status"),
                remarks=payload.get("remarks"),
                course_id=course_id,
            )

        kind = classify_subject_kind(
            kind_marker=marker,
            student_id=student_id if student_id is not None else payload.get("subjectId"),
            course_id=course_id,
        )
        subject_id = payload.get("subjectId") or payload.get("subject_id")
        if not subject_id:
            subject_id = student_id if kind == SubjectKind.STUDENT else payload.get("teacherId") or payload.get("teacher_id")
        if course_id == STAFF_COURSE_SENTINEL:
            course_id = None

        return cls(
            subject_kind=kind,
            subject_id=subject_id,
            attendance_date=payload.get("date") or payload.get("attendance_date"),
            status=payload.get("status"),
            remarks=payload.get("remarks"),
            course_id=course_id if kind == SubjectKind.STUDENT else None,
        )


@dataclass(frozen=True)
class AttendanceFilter:
    subject_kind: Optional[SubjectKind] = None
    subject_id: Optional[str] = None
    course_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, record: AttendanceRecord) -> bool:
        if self.subject_kind is not None and record.subject_kind != self.subject_kind:
            return False
        if self.subject_id is not None and record.subject_id != self.subject_id:
            return False
        if self.course_id is not None and record.course_id != self.course_id:
            return False
        if self.date_from is not None and record.attendance_date < self.date_from:
            return False
        if self.date_to is not None and record.attendance_date > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class BatchResult:
    inserted: int
    updated: int
    records: tuple[AttendanceRecord, ...]


@dataclass(frozen=True)
class AttendanceSummary:
    present: int
    absent: int
    late: int

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late

    @property
    def attendance_rate(self) -> float:
        """Share of marks that were Present or Late, 0.0 when nothing is marked."""
        if not self.total:
            return 0.0
        return round((self.present + self.late) / self.total, 4)
