from __future__ import annotations

import logging
import secrets

from ..common.validators import optional_text, require_non_empty, require_non_negative_amount
from ..core.exceptions import NotFoundError
from ..store.entity_store import EntityStore
from .model import Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, store: EntityStore, courses: CourseRepository):
        self._store = store
        self._courses = courses

    def list_courses(self) -> list[Course]:
        return list(self._store.snapshot.courses)

    def upsert(self, data: dict) -> Course:
        teacher_id = optional_text(data.get("teacher_id"))
        if teacher_id and not self._store.snapshot.teacher(teacher_id):
            raise NotFoundError(f"Teacher {teacher_id} not found")

        subjects = data.get("subjects") or ()
        if isinstance(subjects, str):
            subjects = subjects.split(",")

        course = Course(
            course_id=optional_text(data.get("course_id")) or f"C-{secrets.randbelow(90000) + 10000}",
            name=require_non_empty(data.get("name"), "Course name"),
            teacher_id=teacher_id,
            base_fee=require_non_negative_amount(data.get("base_fee"), "Base fee"),
            duration=optional_text(data.get("duration")),
            subjects=tuple(s.strip() for s in subjects if s and s.strip()),
            timings=optional_text(data.get("timings")),
        )
        self._courses.upsert(course)
        # Students' teachers are derived from courses, so nothing else to patch.
        self._store.apply(lambda s: s.with_course(course))
        logger.info("Course %s saved (teacher %s)", course.course_id, course.teacher_id or "-")
        return course

    def delete(self, course_id: str) -> None:
        self._store.course(course_id)
        self._courses.delete(course_id)
        self._store.apply(lambda s: s.without_course(course_id))
        logger.info("Course %s deleted", course_id)
