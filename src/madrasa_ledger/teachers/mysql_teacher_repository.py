from __future__ import annotations

from typing import Optional

from ..core.enums import SalaryType, TeacherStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchone,
    join_csv,
    normalize_money,
    normalize_mysql_date,
    split_csv,
)
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = """
    id, full_name, dob, gender, phone, email, qualification, subjects,
    experience, joining_date, salary_type, salary_amount, bank_account_no,
    bank_ifsc, status, login_id, password_hash, substitute_for_id
"""

SELECT_ALL_SQL = f"SELECT {_COLUMNS} FROM teachers ORDER BY id ASC"


def row_to_teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=str(r["id"]),
        full_name=r["full_name"],
        salary_amount=normalize_money(r.get("salary_amount")),
        salary_type=SalaryType(r.get("salary_type") or SalaryType.MONTHLY.value),
        status=TeacherStatus(r.get("status") or TeacherStatus.ACTIVE.value),
        dob=normalize_mysql_date(r.get("dob")),
        gender=r.get("gender"),
        phone=r.get("phone"),
        email=r.get("email"),
        qualification=r.get("qualification"),
        subjects=split_csv(r.get("subjects")),
        experience=int(r.get("experience") or 0),
        joining_date=normalize_mysql_date(r.get("joining_date")),
        bank_account_no=r.get("bank_account_no"),
        bank_ifsc=r.get("bank_ifsc"),
        login_id=r.get("login_id"),
        password_hash=r.get("password_hash"),
        substitute_for_id=r.get("substitute_for_id"),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_login_id(self, login_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE login_id=%s", (login_id,))
            r = fetchone(cur)
            return row_to_teacher(r) if r else None

    def upsert(self, teacher: Teacher) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO teachers({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), dob=VALUES(dob), gender=VALUES(gender),
                    phone=VALUES(phone), email=VALUES(email), qualification=VALUES(qualification),
                    subjects=VALUES(subjects), experience=VALUES(experience),
                    joining_date=VALUES(joining_date), salary_type=VALUES(salary_type),
                    salary_amount=VALUES(salary_amount), bank_account_no=VALUES(bank_account_no),
                    bank_ifsc=VALUES(bank_ifsc), status=VALUES(status), login_id=VALUES(login_id),
                    password_hash=VALUES(password_hash), substitute_for_id=VALUES(substitute_for_id)
                """,
                (
                    teacher.teacher_id,
                    teacher.full_name,
                    teacher.dob,
                    teacher.gender,
                    teacher.phone,
                    teacher.email,
                    teacher.qualification,
                    join_csv(teacher.subjects),
                    int(teacher.experience),
                    teacher.joining_date,
                    teacher.salary_type.value,
                    teacher.salary_amount,
                    teacher.bank_account_no,
                    teacher.bank_ifsc,
                    teacher.status.value,
                    teacher.login_id,
                    teacher.password_hash,
                    teacher.substitute_for_id,
                ),
            )

    def delete(self, teacher_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE id=%s", (teacher_id,))
            return cur.rowcount > 0
