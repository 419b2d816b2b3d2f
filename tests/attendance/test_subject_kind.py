from __future__ import annotations

import pytest

from madrasa_ledger.attendance.model import AttendanceInput, classify_subject_kind
from madrasa_ledger.core.enums import Role, SubjectKind
from madrasa_ledger.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind_marker": "Staff", "student_id": "S-1"},
        {"kind_marker": SubjectKind.STAFF},
        {"course_id": "STAFF", "student_id": "S-1"},
        {"student_id": None},
        {"student_id": ""},
        {"student_id": "N/A"},
    ],
)
def test_staff_markers_are_equivalent(kwargs):
    assert classify_subject_kind(**kwargs) == SubjectKind.STAFF


def test_real_student_id_is_a_student_row():
    assert classify_subject_kind(student_id="S-1", course_id="C-1") == SubjectKind.STUDENT


def test_legacy_staff_payload_maps_to_teacher_subject():
    item = AttendanceInput.from_payload(
        {"studentId": "N/A", "courseId": "STAFF", "teacherId": "T-2", "date": "2025-06-01", "status": "Present"}
    )
    assert item.subject_kind == SubjectKind.STAFF
    assert item.subject_id == "T-2"
    assert item.course_id is None


def test_tagged_student_payload():
    item = AttendanceInput.from_payload(
        {"subjectKind": "Student", "subjectId": "S-1", "courseId": "C-1", "date": "2025-06-01", "status": "Late"}
    )
    assert (item.subject_kind, item.subject_id, item.course_id) == (SubjectKind.STUDENT, "S-1", "C-1")
    assert item.attendance_date == "2025-06-01"


@pytest.mark.parametrize("marker", ["Teacher", "bogus", 7])
def test_unknown_kind_marker_is_kept_for_validation(marker):
    item = AttendanceInput.from_payload(
        {"subjectKind": marker, "subjectId": "T-1", "date": "2025-06-01", "status": "Present"}
    )
    assert item.subject_kind == marker
    assert item.subject_id == "T-1"


def test_unknown_kind_marker_is_reported_at_its_index(container):
    rows = [
        {"subjectKind": "Student", "subjectId": "S-1", "date": "2025-06-01", "status": "Present"},
        {"subjectKind": "Teacher", "subjectId": "T-1", "date": "2025-06-01", "status": "Present"},
    ]
    with pytest.raises(ValidationError) as exc:
        container.attendance_service.submit_batch(
            [AttendanceInput.from_payload(r) for r in rows], recorded_by_role=Role.ADMIN
        )
    assert [e["index"] for e in exc.value.errors] == [1]
    assert "Subject kind" in exc.value.errors[0]["error"]
