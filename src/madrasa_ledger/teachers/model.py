from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import SalaryType, TeacherStatus


@dataclass(frozen=True)
class Teacher:
    """Domain entity: a teacher (Ustadh) on the payroll.

    ``password_hash`` never leaves the service layer; serializers drop it.
    """

    teacher_id: str
    full_name: str
    salary_amount: Decimal
    salary_type: SalaryType = SalaryType.MONTHLY
    status: TeacherStatus = TeacherStatus.ACTIVE
    dob: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    qualification: Optional[str] = None
    subjects: tuple[str, ...] = ()
    experience: int = 0
    joining_date: Optional[date] = None
    bank_account_no: Optional[str] = None
    bank_ifsc: Optional[str] = None
    login_id: Optional[str] = None
    password_hash: Optional[str] = None
    substitute_for_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == TeacherStatus.ACTIVE
