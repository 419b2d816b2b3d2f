from __future__ import annotations

import logging
import secrets
from typing import Any, Iterable

from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    optional_text,
    parse_enum,
    require_non_empty,
    require_non_negative_amount,
)
from ..core.enums import StudentStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..store.entity_store import EntityStore
from .model import BulkImportResult, FeeStructure, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def generate_student_id() -> str:
    return f"S-{1000 + secrets.randbelow(9000)}{secrets.randbelow(100):02d}"


def _optional_date(value: Any, field_name: str):
    return parse_iso_date(value, field_name) if optional_text(value) else None


class StudentService:
    def __init__(self, store: EntityStore, students: StudentRepository):
        self._store = store
        self._students = students

    def list_students(self) -> list[Student]:
        return list(self._store.snapshot.students)

    def get(self, student_id: str) -> Student:
        return self._store.student(student_id)

    def build(self, data: dict) -> Student:
        """Validate a payload into a Student; no side effects."""
        fee = data.get("fee_structure") or {}
        installments = fee.get("installments_count") or 1
        try:
            installments = int(installments)
        except (TypeError, ValueError):
            raise ValidationError("Installments count must be a whole number")
        if installments < 1:
            raise ValidationError("Installments count must be at least 1")

        course_id = optional_text(data.get("course_id"))
        if course_id and not self._store.snapshot.course(course_id):
            raise NotFoundError(f"Course {course_id} not found")

        return Student(
            student_id=optional_text(data.get("student_id")) or generate_student_id(),
            full_name=require_non_empty(data.get("full_name"), "Full name"),
            course_id=course_id,
            fee_structure=FeeStructure(
                total_fee=require_non_negative_amount(fee.get("total_fee"), "Total fee"),
                discount=require_non_negative_amount(fee.get("discount"), "Discount"),
                is_installment=bool(fee.get("is_installment")),
                installments_count=installments,
            ),
            status=parse_enum(StudentStatus, data.get("status") or StudentStatus.ACTIVE, "Status"),
            dob=_optional_date(data.get("dob"), "Date of birth"),
            gender=optional_text(data.get("gender")),
            phone=optional_text(data.get("phone")),
            email=optional_text(data.get("email")),
            address=optional_text(data.get("address")),
            parent_name=optional_text(data.get("parent_name")),
            parent_phone=optional_text(data.get("parent_phone")),
            parent_email=optional_text(data.get("parent_email")),
            admission_date=_optional_date(data.get("admission_date"), "Admission date"),
            class_level=optional_text(data.get("class_level")),
            remarks=optional_text(data.get("remarks")),
        )

    def upsert(self, data: dict) -> Student:
        student = self.build(data)
        self._students.upsert(student)
        self._store.apply(lambda s: s.with_student(student))
        logger.info("Student %s saved", student.student_id)
        return student

    def bulk_import(self, rows: Iterable[dict]) -> BulkImportResult:
        """Save each row on its own; a failing row never undoes the others."""
        processed = 0
        errors: list[dict] = []
        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                errors.append({"index": i, "studentId": None, "error": "Row must be an object"})
                continue
            try:
                self.upsert(row)
                processed += 1
            except DomainError as e:
                errors.append({"index": i, "studentId": row.get("student_id"), "error": str(e)})

        if errors:
            logger.warning("Bulk import: %d saved, %d rejected", processed, len(errors))
        else:
            logger.info("Bulk import: %d saved", processed)
        return BulkImportResult(processed=processed, errors=errors)

    def delete(self, student_id: str) -> None:
        self._store.student(student_id)
        self._students.delete(student_id)
        self._store.apply(lambda s: s.without_student(student_id))
        logger.info("Student %s deleted", student_id)
