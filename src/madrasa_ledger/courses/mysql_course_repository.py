from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, join_csv, normalize_money, split_csv
from .model import Course
from .repository import CourseRepository

SELECT_ALL_SQL = """
    SELECT id, name, duration, subjects, base_fee, teacher_id, timings
    FROM courses
    ORDER BY id ASC
"""


def row_to_course(r: dict) -> Course:
    return Course(
        course_id=str(r["id"]),
        name=r["name"],
        teacher_id=r.get("teacher_id") or None,
        base_fee=normalize_money(r.get("base_fee")),
        duration=r.get("duration"),
        subjects=split_csv(r.get("subjects")),
        timings=r.get("timings"),
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, course: Course) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(id, name, duration, subjects, base_fee, teacher_id, timings)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), duration=VALUES(duration), subjects=VALUES(subjects),
                    base_fee=VALUES(base_fee), teacher_id=VALUES(teacher_id), timings=VALUES(timings)
                """,
                (
                    course.course_id,
                    course.name,
                    course.duration,
                    join_csv(course.subjects),
                    course.base_fee,
                    course.teacher_id,
                    course.timings,
                ),
            )

    def delete(self, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE id=%s", (course_id,))
            return cur.rowcount > 0
