from __future__ import annotations

from decimal import Decimal

import pytest
from werkzeug.security import check_password_hash

from madrasa_ledger.core.enums import StudentStatus
from madrasa_ledger.core.exceptions import NotFoundError, ValidationError


def test_student_upsert_validates_and_patches_snapshot(container, db):
    student = container.student_service.upsert(
        {
            "student_id": "S-5",
            "full_name": "Aisha",
            "course_id": "C-2",
            "fee_structure": {"total_fee": "2500", "discount": "500"},
            "admission_date": "2025-04-01",
        }
    )
    assert student.monthly_obligation == Decimal("2500.00")
    assert db.students["S-5"] == student
    assert container.store.student("S-5") == student


def test_student_generated_id(container):
    student = container.student_service.upsert({"full_name": "Umar"})
    assert student.student_id.startswith("S-")
    assert student.status == StudentStatus.ACTIVE


@pytest.mark.parametrize(
    "data, error",
    [
        ({"full_name": ""}, ValidationError),
        ({"full_name": "X", "fee_structure": {"total_fee": "-1"}}, ValidationError),
        ({"full_name": "X", "course_id": "C-404"}, NotFoundError),
        ({"full_name": "X", "status": "Graduated"}, ValidationError),
        ({"full_name": "X", "dob": "2010-13-01"}, ValidationError),
    ],
)
def test_student_validation(container, data, error):
    with pytest.raises(error):
        container.student_service.upsert(data)


def test_bulk_import_keeps_good_rows_when_one_fails(container, db):
    db.fail_student_ids = {"S-11"}
    result = container.student_service.bulk_import(
        [
            {"student_id": "S-10", "full_name": "Row one", "course_id": "C-1"},
            {"student_id": "S-11", "full_name": "Row two", "course_id": "C-1"},
            {"student_id": "S-12", "full_name": "", "course_id": "C-1"},
            {"student_id": "S-13", "full_name": "Row four", "course_id": "C-2"},
        ]
    )

    assert result.processed == 2
    assert [(e["index"], e["studentId"]) for e in result.errors] == [(1, "S-11"), (2, "S-12")]
    assert {"S-10", "S-13"} <= set(db.students)
    assert "S-11" not in db.students
    assert container.store.snapshot.student("S-13") is not None


def test_student_delete(container, db):
    container.student_service.delete("S-4")
    assert "S-4" not in db.students
    with pytest.raises(NotFoundError):
        container.student_service.get("S-4")


def test_teacher_password_is_hashed_and_kept_on_later_edits(container):
    svc = container.teacher_service
    t = svc.upsert({"teacher_id": "T-9", "full_name": "Ustadh Bilal", "salary_amount": "7000", "login_id": "bilal"}, password="secret1")
    assert check_password_hash(t.password_hash, "secret1")

    edited = svc.upsert({"teacher_id": "T-9", "full_name": "Ustadh Bilal", "salary_amount": "7500", "login_id": "bilal"})
    assert edited.password_hash == t.password_hash
    assert edited.salary_amount == Decimal("7500.00")


def test_teacher_rules(container):
    svc = container.teacher_service
    with pytest.raises(ValidationError):
        svc.upsert({"teacher_id": "T-9", "full_name": "A", "salary_amount": "1"}, password="short")
    with pytest.raises(ValidationError):
        svc.upsert({"teacher_id": "T-9", "full_name": "A", "salary_amount": "1", "login_id": "ahmed"})
    with pytest.raises(ValidationError):
        svc.upsert({"teacher_id": "T-9", "full_name": "A", "salary_amount": "1", "substitute_for_id": "T-9"})
    with pytest.raises(NotFoundError):
        svc.upsert({"teacher_id": "T-9", "full_name": "A", "salary_amount": "1", "substitute_for_id": "T-404"})


def test_course_requires_known_teacher(container):
    with pytest.raises(NotFoundError):
        container.course_service.upsert({"name": "Tajweed", "teacher_id": "T-404"})

    course = container.course_service.upsert({"name": "Tajweed", "subjects": "Makharij, Sifaat"})
    assert course.teacher_id is None
    assert course.subjects == ("Makharij", "Sifaat")
    assert course in container.course_service.list_courses()
