from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import StudentStatus


@dataclass(frozen=True)
class FeeStructure:
    """Monthly fee terms.

    ``total_fee`` is already discount-adjusted; it is the monthly obligation.
    """

    total_fee: Decimal
    discount: Decimal = Decimal("0.00")
    is_installment: bool = False
    installments_count: int = 1


@dataclass(frozen=True)
class Student:
    """Domain entity: a student (Talib) enrolled in at most one course."""

    student_id: str
    full_name: str
    course_id: Optional[str]
    fee_structure: FeeStructure
    status: StudentStatus = StudentStatus.ACTIVE
    dob: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    parent_email: Optional[str] = None
    admission_date: Optional[date] = None
    class_level: Optional[str] = None
    remarks: Optional[str] = None

    @property
    def monthly_obligation(self) -> Decimal:
        return self.fee_structure.total_fee

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE


@dataclass(frozen=True)
class BulkImportResult:
    processed: int
    errors: list[dict]
