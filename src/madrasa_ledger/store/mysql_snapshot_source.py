from __future__ import annotations

from ..attendance import mysql_attendance_repository as attendance_sql
from ..courses import mysql_course_repository as courses_sql
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..ledger import mysql_ledger_repository as ledger_sql
from ..periods import mysql_period_repository as periods_sql
from ..settings import mysql_settings_repository as settings_sql
from ..settings.model import SystemSettings
from ..students import mysql_student_repository as students_sql
from ..teachers import mysql_teacher_repository as teachers_sql
from .snapshot import Snapshot
from .source import SnapshotSource


class MySQLSnapshotSource(SnapshotSource):
    """Reads every table inside one read-only consistent-snapshot transaction."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def fetch_snapshot(self) -> Snapshot:
        with db_cursor(self._conn_factory, consistent_snapshot=True) as (_, cur):
            cur.execute(students_sql.SELECT_ALL_SQL)
            students = tuple(students_sql.row_to_student(r) for r in fetchall(cur))

            cur.execute(teachers_sql.SELECT_ALL_SQL)
            teachers = tuple(teachers_sql.row_to_teacher(r) for r in fetchall(cur))

            cur.execute(courses_sql.SELECT_ALL_SQL)
            courses = tuple(courses_sql.row_to_course(r) for r in fetchall(cur))

            cur.execute(attendance_sql.SELECT_ALL_SQL)
            attendance = tuple(attendance_sql.row_to_attendance(r) for r in fetchall(cur))

            cur.execute(ledger_sql.SELECT_FEES_SQL)
            fees = [ledger_sql.row_to_fee(r) for r in fetchall(cur)]
            cur.execute(ledger_sql.SELECT_SALARIES_SQL)
            salaries = [ledger_sql.row_to_salary(r) for r in fetchall(cur)]

            cur.execute(periods_sql.SELECT_ALL_SQL)
            locks = tuple(periods_sql.row_to_lock(r) for r in fetchall(cur))

            cur.execute(settings_sql.SELECT_SQL)
            settings = settings_sql.row_to_settings(fetchone(cur)) or SystemSettings()

        return Snapshot(
            students=students,
            teachers=teachers,
            courses=courses,
            attendance=attendance,
            transactions=tuple(fees + salaries),
            monthly_locks=locks,
            settings=settings,
        )
