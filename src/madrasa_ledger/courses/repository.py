from __future__ import annotations

from typing import Protocol

from .model import Course


class CourseRepository(Protocol):
    def upsert(self, course: Course) -> None:
        raise NotImplementedError

    def delete(self, course_id: str) -> bool:
        raise NotImplementedError
