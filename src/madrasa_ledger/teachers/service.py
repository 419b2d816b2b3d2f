from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from typing import Optional

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    optional_text,
    parse_enum,
    require_min_length,
    require_non_empty,
    require_non_negative_amount,
)
from ..core.enums import SalaryType, TeacherStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..store.entity_store import EntityStore
from .model import Teacher
from .repository import TeacherRepository

logger = logging.getLogger(__name__)


def generate_teacher_id() -> str:
    return f"T-{secrets.randbelow(900000) + 100000}"


def _subjects(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(s.strip() for s in value if s and str(s).strip())


class TeacherService:
    def __init__(self, store: EntityStore, teachers: TeacherRepository):
        self._store = store
        self._teachers = teachers

    def list_teachers(self) -> list[Teacher]:
        return list(self._store.snapshot.teachers)

    def get(self, teacher_id: str) -> Teacher:
        return self._store.teacher(teacher_id)

    def upsert(self, data: dict, *, password: Optional[str] = None) -> Teacher:
        teacher_id = optional_text(data.get("teacher_id")) or generate_teacher_id()
        existing = self._store.snapshot.teacher(teacher_id)

        experience = data.get("experience") or 0
        try:
            experience = int(experience)
        except (TypeError, ValueError):
            raise ValidationError("Experience must be a whole number of years")

        substitute_for = optional_text(data.get("substitute_for_id"))
        if substitute_for:
            if substitute_for == teacher_id:
                raise ValidationError("A teacher cannot substitute for themselves")
            if not self._store.snapshot.teacher(substitute_for):
                raise NotFoundError(f"Teacher {substitute_for} not found")

        login_id = optional_text(data.get("login_id"))
        if login_id:
            for other in self._store.snapshot.teachers:
                if other.login_id == login_id and other.teacher_id != teacher_id:
                    raise ValidationError(f"Login id {login_id} is already in use")

        joining = optional_text(data.get("joining_date"))
        dob = optional_text(data.get("dob"))
        teacher = Teacher(
            teacher_id=teacher_id,
            full_name=require_non_empty(data.get("full_name"), "Full name"),
            salary_amount=require_non_negative_amount(data.get("salary_amount"), "Salary amount"),
            salary_type=parse_enum(SalaryType, data.get("salary_type") or SalaryType.MONTHLY, "Salary type"),
            status=parse_enum(TeacherStatus, data.get("status") or TeacherStatus.ACTIVE, "Status"),
            dob=parse_iso_date(dob, "Date of birth") if dob else None,
            gender=optional_text(data.get("gender")),
            phone=optional_text(data.get("phone")),
            email=optional_text(data.get("email")),
            qualification=optional_text(data.get("qualification")),
            subjects=_subjects(data.get("subjects")),
            experience=experience,
            joining_date=parse_iso_date(joining, "Joining date") if joining else None,
            bank_account_no=optional_text(data.get("bank_account_no")),
            bank_ifsc=optional_text(data.get("bank_ifsc")),
            login_id=login_id,
            password_hash=existing.password_hash if existing else None,
            substitute_for_id=substitute_for,
        )

        if password:
            require_min_length(password, "Password", 6)
            teacher = replace(teacher, password_hash=generate_password_hash(password))

        self._teachers.upsert(teacher)
        self._store.apply(lambda s: s.with_teacher(teacher))
        logger.info("Teacher %s saved", teacher.teacher_id)
        return teacher

    def delete(self, teacher_id: str) -> None:
        self._store.teacher(teacher_id)
        self._teachers.delete(teacher_id)
        self._store.apply(lambda s: s.without_teacher(teacher_id))
        logger.info("Teacher %s deleted", teacher_id)
