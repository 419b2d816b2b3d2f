from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..core.enums import AttendanceStatus, Role, SubjectKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, normalize_mysql_date
from .model import AttendanceRecord, classify_subject_kind
from .repository import AttendanceRepository

SELECT_ALL_SQL = """
    SELECT id, subject_kind, subject_id, student_id, teacher_id, course_id,
           attendance_date, status, remarks, marked_by_role
    FROM attendance
    ORDER BY id ASC
"""


def row_to_attendance(r: dict) -> AttendanceRecord:
    kind = classify_subject_kind(
        kind_marker=r.get("subject_kind"),
        student_id=r.get("student_id"),
        course_id=r.get("course_id"),
    )
    subject_id = r.get("subject_id") or (r.get("student_id") if kind == SubjectKind.STUDENT else r.get("teacher_id"))
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        subject_kind=kind,
        subject_id=str(subject_id),
        attendance_date=normalize_mysql_date(r["attendance_date"]),
        status=AttendanceStatus(r["status"]),
        recorded_by_role=Role(r.get("marked_by_role") or Role.ADMIN.value),
        remarks=r.get("remarks") or "",
        course_id=r.get("course_id") if kind == SubjectKind.STUDENT else None,
        teacher_id=r.get("teacher_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_many(self, records: Sequence[AttendanceRecord]) -> Sequence[AttendanceRecord]:
        saved: list[AttendanceRecord] = []
        # One connection, one commit: any failing row rolls the batch back.
        with db_cursor(self._conn_factory) as (_, cur):
            for rec in records:
                is_student = rec.subject_kind == SubjectKind.STUDENT
                cur.execute(
                    """
                    INSERT INTO attendance(
                        subject_kind, subject_id, student_id, teacher_id, course_id,
                        attendance_date, status, remarks, marked_by_role
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        id=LAST_INSERT_ID(id),
                        teacher_id=VALUES(teacher_id),
                        course_id=VALUES(course_id),
                        status=VALUES(status),
                        remarks=VALUES(remarks),
                        marked_by_role=VALUES(marked_by_role)
                    """,
                    (
                        rec.subject_kind.value,
                        rec.subject_id,
                        rec.subject_id if is_student else None,
                        rec.teacher_id,
                        rec.course_id,
                        rec.attendance_date,
                        rec.status.value,
                        rec.remarks,
                        rec.recorded_by_role.value,
                    ),
                )
                saved.append(replace(rec, attendance_id=int(cur.lastrowid)))
        return saved
