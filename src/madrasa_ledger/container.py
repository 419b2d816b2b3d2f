from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceReconciler
from .core.constants import DEFAULT_STORE_TIMEOUT_SECONDS
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .ledger.mysql_ledger_repository import MySQLLedgerRepository
from .ledger.repository import LedgerRepository
from .ledger.service import LedgerService
from .periods.guard import PeriodLockGuard
from .periods.mysql_period_repository import MySQLMonthlyLockRepository
from .periods.repository import MonthlyLockRepository
from .reports.service import ReportService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .store.entity_store import EntityStore
from .store.mysql_snapshot_source import MySQLSnapshotSource
from .store.source import SnapshotSource
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.repository import TeacherRepository
from .teachers.service import TeacherService
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    store: EntityStore

    auth_service: AuthService
    student_service: StudentService
    teacher_service: TeacherService
    course_service: CourseService
    settings_service: SettingsService
    period_guard: PeriodLockGuard
    attendance_service: AttendanceReconciler
    ledger_service: LedgerService
    report_service: ReportService


def wire(
    *,
    source: SnapshotSource,
    students_repo: StudentRepository,
    teachers_repo: TeacherRepository,
    courses_repo: CourseRepository,
    attendance_repo: AttendanceRepository,
    ledger_repo: LedgerRepository,
    locks_repo: MonthlyLockRepository,
    settings_repo: SettingsRepository,
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    admin_login_id: Optional[str] = None,
    admin_password_hash: Optional[str] = None,
) -> Container:
    """Assemble services around one shared EntityStore."""
    store = EntityStore(source, timeout_seconds=store_timeout_seconds)
    guard = PeriodLockGuard(store, locks_repo)
    attendance_service = AttendanceReconciler(store, attendance_repo, guard)
    ledger_service = LedgerService(store, ledger_repo, guard)

    return Container(
        store=store,
        auth_service=AuthService(
            teachers_repo,
            admin_login_id=admin_login_id,
            admin_password_hash=admin_password_hash,
        ),
        student_service=StudentService(store, students_repo),
        teacher_service=TeacherService(store, teachers_repo),
        course_service=CourseService(store, courses_repo),
        settings_service=SettingsService(store, settings_repo),
        period_guard=guard,
        attendance_service=attendance_service,
        ledger_service=ledger_service,
        report_service=ReportService(store, ledger_service, attendance_service),
    )


def build_container(
    *,
    db_config: dict,
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    admin_login_id: Optional[str] = None,
    admin_password_hash: Optional[str] = None,
) -> Container:
    config = DBConfig.from_dict({"statement_timeout": store_timeout_seconds, **db_config})
    conn = DatabaseConnection.get_instance(config)

    return wire(
        source=MySQLSnapshotSource(conn),
        students_repo=MySQLStudentRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        ledger_repo=MySQLLedgerRepository(conn),
        locks_repo=MySQLMonthlyLockRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        store_timeout_seconds=store_timeout_seconds,
        admin_login_id=admin_login_id,
        admin_password_hash=admin_password_hash,
    )
