from __future__ import annotations

import pytest

from madrasa_ledger.attendance.model import AttendanceInput
from madrasa_ledger.core.enums import Role, SubjectKind
from madrasa_ledger.core.exceptions import AuthenticationError, AuthorizationError
from madrasa_ledger.users.access import AccessScope
from madrasa_ledger.users.model import SessionUser

from conftest import ADMIN_PASSWORD, SUBSTITUTE_PASSWORD, TEACHER_PASSWORD


def test_admin_login(container):
    user = container.auth_service.authenticate("admin", ADMIN_PASSWORD)
    assert user.role == Role.ADMIN
    assert user.teacher_id is None


def test_teacher_and_substitute_login(container):
    teacher = container.auth_service.authenticate("ahmed", TEACHER_PASSWORD)
    assert (teacher.role, teacher.teacher_id) == (Role.TEACHER, "T-1")

    sub = container.auth_service.authenticate("yusuf", SUBSTITUTE_PASSWORD)
    assert (sub.role, sub.teacher_id, sub.covers_teacher_id) == (Role.SUBSTITUTE, "T-3", "T-1")


@pytest.mark.parametrize("login_id, password", [("admin", "nope"), ("ahmed", "nope"), ("ghost", "x")])
def test_bad_credentials(container, login_id, password):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(login_id, password)


def test_session_round_trip():
    user = SessionUser("T-3", "Ustadh Yusuf", Role.SUBSTITUTE, teacher_id="T-3", covers_teacher_id="T-1")
    assert SessionUser.from_session(user.to_session()) == user
    assert SessionUser.from_session({}) is None


def _scope(container, user):
    return AccessScope.for_user(user, container.store.snapshot)


def test_teacher_scope(container):
    scope = _scope(container, SessionUser("T-1", "Ahmed", Role.TEACHER, teacher_id="T-1"))
    assert scope.course_ids == frozenset({"C-1"})
    assert scope.student_ids == frozenset({"S-1", "S-3"})
    assert scope.can_see_salary("T-1")
    assert not scope.can_see_salary("T-2")
    assert not scope.can_see_fees()


def test_substitute_works_on_covered_courses_without_finance(container):
    scope = _scope(container, SessionUser("T-3", "Yusuf", Role.SUBSTITUTE, teacher_id="T-3", covers_teacher_id="T-1"))
    assert scope.can_see_student("S-1")
    assert not scope.can_see_student("S-2")
    assert not scope.can_see_salary("T-3")
    assert not scope.can_see_salary("T-1")
    scope.require_can_mark(SubjectKind.STUDENT, "S-1")


def test_only_admin_marks_staff_and_others_students(container):
    teacher = _scope(container, SessionUser("T-1", "Ahmed", Role.TEACHER, teacher_id="T-1"))
    with pytest.raises(AuthorizationError):
        teacher.require_can_mark(SubjectKind.STAFF, "T-1")
    with pytest.raises(AuthorizationError):
        teacher.require_can_mark(SubjectKind.STUDENT, "S-2")

    admin = _scope(container, SessionUser("admin", "Director", Role.ADMIN))
    admin.require_can_mark(SubjectKind.STAFF, "T-2")


def test_attendance_visibility(container):
    container.attendance_service.submit_batch(
        [
            AttendanceInput(SubjectKind.STUDENT, "S-1", "2025-06-01", "Present"),
            AttendanceInput(SubjectKind.STUDENT, "S-2", "2025-06-01", "Present"),
            AttendanceInput(SubjectKind.STAFF, "T-1", "2025-06-01", "Present"),
            AttendanceInput(SubjectKind.STAFF, "T-2", "2025-06-01", "Absent"),
        ],
        recorded_by_role=Role.ADMIN,
    )
    rows = container.attendance_service.history()

    teacher = _scope(container, SessionUser("T-1", "Ahmed", Role.TEACHER, teacher_id="T-1"))
    assert {(r.subject_kind, r.subject_id) for r in teacher.filter_attendance(rows)} == {
        (SubjectKind.STUDENT, "S-1"),
        (SubjectKind.STAFF, "T-1"),
    }

    sub = _scope(container, SessionUser("T-3", "Yusuf", Role.SUBSTITUTE, teacher_id="T-3", covers_teacher_id="T-1"))
    assert [r.subject_id for r in sub.filter_attendance(rows)] == ["S-1"]
