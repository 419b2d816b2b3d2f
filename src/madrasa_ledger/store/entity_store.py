from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import replace
from typing import Callable, Optional

from ..attendance.model import AttendanceKey
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_STORE_TIMEOUT_SECONDS
from ..core.enums import SubjectKind
from ..core.exceptions import NotFoundError, SourceUnavailable, StoreTimeout
from ..courses.model import Course
from ..students.model import Student
from ..teachers.model import Teacher
from .snapshot import Snapshot
from .source import SnapshotSource

logger = logging.getLogger(__name__)


class EntityStore:
    """Holds the session snapshot every calculator and register reads from.

    ``load()`` fetches into a fresh snapshot and swaps it in only after the
    fetch fully succeeded. A failed or abandoned load leaves the previous
    snapshot in place and marks the store stale.
    """

    def __init__(
        self,
        source: SnapshotSource,
        *,
        timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        clock: Callable = now_local,
    ):
        self._source = source
        self._timeout = float(timeout_seconds)
        self._clock = clock
        self._snapshot = Snapshot()
        self._stale = False
        self._swap_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="entity-store-load")

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def has_loaded(self) -> bool:
        return self._snapshot.loaded_at is not None

    def load(self) -> Snapshot:
        future = self._executor.submit(self._source.fetch_snapshot)
        try:
            fresh = future.result(timeout=self._timeout)
        except FutureTimeout:
            future.cancel()
            self._stale = True
            logger.error("Snapshot load timed out after %.1fs; keeping previous snapshot", self._timeout)
            raise StoreTimeout(f"Backing store did not answer within {self._timeout:g}s")
        except SourceUnavailable:
            self._stale = True
            logger.error("Snapshot load failed; keeping previous snapshot", exc_info=True)
            raise

        fresh = replace(fresh, loaded_at=self._clock())
        with self._swap_lock:
            self._snapshot = fresh
            self._stale = False
        logger.info(
            "Snapshot loaded: %d students, %d teachers, %d courses, %d attendance, %d transactions",
            len(fresh.students),
            len(fresh.teachers),
            len(fresh.courses),
            len(fresh.attendance),
            len(fresh.transactions),
        )
        return fresh

    def apply(self, mutator: Callable[[Snapshot], Snapshot]) -> Snapshot:
        """Swap in a snapshot derived from the current one.

        Called after a durable write so the change is visible to later reads
        from this store without a full reload.
        """
        with self._swap_lock:
            self._snapshot = mutator(self._snapshot)
            return self._snapshot

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # Lookups
    def student(self, student_id: str) -> Student:
        student = self._snapshot.student(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def teacher(self, teacher_id: str) -> Teacher:
        teacher = self._snapshot.teacher(teacher_id)
        if not teacher:
            raise NotFoundError(f"Teacher {teacher_id} not found")
        return teacher

    def course(self, course_id: str) -> Course:
        course = self._snapshot.course(course_id)
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def subject_exists(self, kind: SubjectKind, subject_id: Optional[str]) -> bool:
        if kind == SubjectKind.STUDENT:
            return self._snapshot.student(subject_id) is not None
        return self._snapshot.teacher(subject_id) is not None

    def attendance_for(self, key: AttendanceKey):
        return self._snapshot.attendance_for(key)

    def resolve_assigned_teachers(self, student: Student) -> frozenset[str]:
        """Teachers of a student, derived from course_id -> course.teacher_id.

        Computed from the current snapshot on every call.
        """
        course = self._snapshot.course(student.course_id)
        if not course or not course.teacher_id:
            return frozenset()
        return frozenset({course.teacher_id})

    def students_of_teacher(self, teacher_id: str) -> list[Student]:
        course_ids = {c.course_id for c in self._snapshot.courses if c.teacher_id == teacher_id}
        return [s for s in self._snapshot.students if s.course_id in course_ids]
