from __future__ import annotations

from typing import Protocol

from .model import Student


class StudentRepository(Protocol):
    def upsert(self, student: Student) -> None:
        """Insert or fully replace the row keyed by student_id."""

        raise NotImplementedError

    def delete(self, student_id: str) -> bool:
        raise NotImplementedError
