from __future__ import annotations

from ..core.enums import StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, normalize_money, normalize_mysql_date
from .model import FeeStructure, Student
from .repository import StudentRepository

SELECT_ALL_SQL = """
    SELECT id, full_name, dob, gender, phone, email, address,
           parent_name, parent_phone, parent_email, admission_date,
           course_id, class_level, status, monthly_fee, discount_percent,
           is_installment, installments_count, remarks
    FROM students
    ORDER BY id ASC
"""


def row_to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["id"]),
        full_name=r["full_name"],
        course_id=r.get("course_id") or None,
        fee_structure=FeeStructure(
            total_fee=normalize_money(r.get("monthly_fee")),
            discount=normalize_money(r.get("discount_percent")),
            is_installment=bool(r.get("is_installment") or 0),
            installments_count=int(r.get("installments_count") or 1),
        ),
        status=StudentStatus(r.get("status") or StudentStatus.ACTIVE.value),
        dob=normalize_mysql_date(r.get("dob")),
        gender=r.get("gender"),
        phone=r.get("phone"),
        email=r.get("email"),
        address=r.get("address"),
        parent_name=r.get("parent_name"),
        parent_phone=r.get("parent_phone"),
        parent_email=r.get("parent_email"),
        admission_date=normalize_mysql_date(r.get("admission_date")),
        class_level=r.get("class_level"),
        remarks=r.get("remarks"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, student: Student) -> None:
        fee = student.fee_structure
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    id, full_name, dob, gender, phone, email, address,
                    parent_name, parent_phone, parent_email, admission_date,
                    course_id, class_level, status, monthly_fee, discount_percent,
                    is_installment, installments_count, remarks
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), dob=VALUES(dob), gender=VALUES(gender),
                    phone=VALUES(phone), email=VALUES(email), address=VALUES(address),
                    parent_name=VALUES(parent_name), parent_phone=VALUES(parent_phone),
                    parent_email=VALUES(parent_email), admission_date=VALUES(admission_date),
                    course_id=VALUES(course_id), class_level=VALUES(class_level),
                    status=VALUES(status), monthly_fee=VALUES(monthly_fee),
                    discount_percent=VALUES(discount_percent), is_installment=VALUES(is_installment),
                    installments_count=VALUES(installments_count), remarks=VALUES(remarks)
                """,
                (
                    student.student_id,
                    student.full_name,
                    student.dob,
                    student.gender,
                    student.phone,
                    student.email,
                    student.address,
                    student.parent_name,
                    student.parent_phone,
                    student.parent_email,
                    student.admission_date,
                    student.course_id,
                    student.class_level,
                    student.status.value,
                    fee.total_fee,
                    fee.discount,
                    int(fee.is_installment),
                    int(fee.installments_count),
                    student.remarks,
                ),
            )

    def delete(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s", (student_id,))
            return cur.rowcount > 0
