from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Course:
    """Domain entity: a course (Halqa).

    ``teacher_id`` is None while the course is unassigned.
    """

    course_id: str
    name: str
    teacher_id: Optional[str]
    base_fee: Decimal = Decimal("0.00")
    duration: Optional[str] = None
    subjects: tuple[str, ...] = ()
    timings: Optional[str] = None
