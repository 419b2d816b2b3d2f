from __future__ import annotations

import time
from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from madrasa_ledger.container import wire
from madrasa_ledger.core.enums import StudentStatus
from madrasa_ledger.core.exceptions import SourceUnavailable, ValidationError
from madrasa_ledger.courses.model import Course
from madrasa_ledger.settings.model import SystemSettings
from madrasa_ledger.store.snapshot import Snapshot
from madrasa_ledger.students.model import FeeStructure, Student
from madrasa_ledger.teachers.model import Teacher


class InMemoryDatabase:
    """Stands in for MySQL: the repos write here, the source reads from here."""

    def __init__(self):
        self.students: dict[str, Student] = {}
        self.teachers: dict[str, Teacher] = {}
        self.courses: dict[str, Course] = {}
        self.attendance: dict = {}
        self.transactions: list = []
        self.locks: dict = {}
        self.settings: Optional[SystemSettings] = None

        self.fetch_error: Optional[Exception] = None
        self.fetch_delay: float = 0.0
        self.fetch_count = 0
        self.fail_attendance_write = False
        self.fail_student_ids: set[str] = set()
        self._attendance_seq = 0

    def next_attendance_id(self) -> int:
        self._attendance_seq += 1
        return self._attendance_seq


class InMemorySource:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def fetch_snapshot(self) -> Snapshot:
        db = self._db
        db.fetch_count += 1
        if db.fetch_delay:
            time.sleep(db.fetch_delay)
        if db.fetch_error:
            raise db.fetch_error
        return Snapshot(
            students=tuple(db.students.values()),
            teachers=tuple(db.teachers.values()),
            courses=tuple(db.courses.values()),
            attendance=tuple(db.attendance.values()),
            transactions=tuple(db.transactions),
            monthly_locks=tuple(db.locks.values()),
            settings=db.settings or SystemSettings(),
        )


class InMemoryStudents:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def upsert(self, student: Student) -> None:
        if student.student_id in self._db.fail_student_ids:
            raise SourceUnavailable(f"Database operation failed for {student.student_id}")
        self._db.students[student.student_id] = student

    def delete(self, student_id: str) -> bool:
        return self._db.students.pop(student_id, None) is not None


class InMemoryTeachers:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def get_by_login_id(self, login_id: str) -> Optional[Teacher]:
        for t in self._db.teachers.values():
            if t.login_id == login_id:
                return t
        return None

    def upsert(self, teacher: Teacher) -> None:
        self._db.teachers[teacher.teacher_id] = teacher

    def delete(self, teacher_id: str) -> bool:
        return self._db.teachers.pop(teacher_id, None) is not None


class InMemoryCourses:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def upsert(self, course: Course) -> None:
        self._db.courses[course.course_id] = course

    def delete(self, course_id: str) -> bool:
        return self._db.courses.pop(course_id, None) is not None


class InMemoryAttendance:
    def __init__(self, db: InMemoryDatabase):
        self._db = db
        self.calls = 0

    def upsert_many(self, records):
        self.calls += 1
        if self._db.fail_attendance_write:
            raise SourceUnavailable("Database operation failed: lock wait timeout")
        saved = []
        for rec in records:
            existing = self._db.attendance.get(rec.key)
            rec_id = existing.attendance_id if existing else self._db.next_attendance_id()
            rec = replace(rec, attendance_id=rec_id)
            self._db.attendance[rec.key] = rec
            saved.append(rec)
        return saved


class InMemoryLedger:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def append(self, txn) -> None:
        if any(t.receipt_no == txn.receipt_no for t in self._db.transactions):
            raise ValidationError(f"Duplicate receipt {txn.receipt_no}")
        self._db.transactions.append(txn)


class InMemoryLocks:
    def __init__(self, db: InMemoryDatabase):
        self._db = db
        self.saves = 0

    def save(self, lock) -> None:
        self.saves += 1
        self._db.locks[lock.period_month] = lock


class InMemorySettings:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def save(self, settings: SystemSettings) -> None:
        self._db.settings = settings


def make_student(student_id: str, course_id: Optional[str], fee: str, **kwargs) -> Student:
    return Student(
        student_id=student_id,
        full_name=kwargs.pop("full_name", f"Student {student_id}"),
        course_id=course_id,
        fee_structure=FeeStructure(total_fee=Decimal(fee)),
        **kwargs,
    )


def make_teacher(teacher_id: str, salary: str, **kwargs) -> Teacher:
    return Teacher(
        teacher_id=teacher_id,
        full_name=kwargs.pop("full_name", f"Teacher {teacher_id}"),
        salary_amount=Decimal(salary),
        **kwargs,
    )


TEACHER_PASSWORD = "ahmed-pass"
SUBSTITUTE_PASSWORD = "yusuf-pass"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture
def db() -> InMemoryDatabase:
    """Two halqas, four students (one inactive, one fee-free), two teachers and a substitute."""
    d = InMemoryDatabase()
    d.teachers = {
        "T-1": make_teacher(
            "T-1",
            "12000.00",
            full_name="Ustadh Ahmed",
            login_id="ahmed",
            password_hash=generate_password_hash(TEACHER_PASSWORD),
        ),
        "T-2": make_teacher("T-2", "9000.00", full_name="Ustadha Fatima"),
        "T-3": make_teacher(
            "T-3",
            "4000.00",
            full_name="Ustadh Yusuf",
            login_id="yusuf",
            password_hash=generate_password_hash(SUBSTITUTE_PASSWORD),
            substitute_for_id="T-1",
        ),
    }
    d.courses = {
        "C-1": Course("C-1", "Hifz Halqa", "T-1"),
        "C-2": Course("C-2", "Nazra Halqa", "T-2"),
    }
    d.students = {
        "S-1": make_student("S-1", "C-1", "5000.00", full_name="Abdullah"),
        "S-2": make_student("S-2", "C-2", "3000.00", full_name="Maryam"),
        "S-3": make_student("S-3", "C-1", "0.00", full_name="Zaid"),
        "S-4": make_student("S-4", "C-2", "2000.00", full_name="Hamza", status=StudentStatus.INACTIVE),
    }
    return d


@pytest.fixture
def repos(db):
    return SimpleNamespace(
        source=InMemorySource(db),
        students=InMemoryStudents(db),
        teachers=InMemoryTeachers(db),
        courses=InMemoryCourses(db),
        attendance=InMemoryAttendance(db),
        ledger=InMemoryLedger(db),
        locks=InMemoryLocks(db),
        settings=InMemorySettings(db),
    )


@pytest.fixture
def container(repos):
    c = wire(
        source=repos.source,
        students_repo=repos.students,
        teachers_repo=repos.teachers,
        courses_repo=repos.courses,
        attendance_repo=repos.attendance,
        ledger_repo=repos.ledger,
        locks_repo=repos.locks,
        settings_repo=repos.settings,
        store_timeout_seconds=1.0,
        admin_login_id="admin",
        admin_password_hash=generate_password_hash(ADMIN_PASSWORD),
    )
    c.store.load()
    yield c
    c.store.close()


@pytest.fixture
def app(container):
    from madrasa_ledger.main import create_app

    settings = SimpleNamespace(SECRET_KEY="test-secret", TESTING=True, LOG_LEVEL="WARNING", LOG_FILE=None)
    return create_app(settings=settings, container=container)


@pytest.fixture
def client(app):
    return app.test_client()
