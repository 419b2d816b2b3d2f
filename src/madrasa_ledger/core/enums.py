from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access scoping."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    SUBSTITUTE = "SUBSTITUTE"


class SubjectKind(str, Enum):
    """Who an attendance row is about."""

    STUDENT = "Student"
    STAFF = "Staff"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"


class LedgerKind(str, Enum):
    FEE = "Fee"
    SALARY = "Salary"


class SettlementStatus(str, Enum):
    """Tri-state settlement of a subject for a period.

    Nothing paid reads ``Due`` on the fee side and ``Pending`` on payroll.
    """

    PAID = "Paid"
    PARTIAL = "Partial"
    DUE = "Due"
    PENDING = "Pending"


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DROPPED = "Dropped"
    COMPLETED = "Completed"


class TeacherStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    RESIGNED = "Resigned"


class SalaryType(str, Enum):
    MONTHLY = "Monthly"
    HOURLY = "Hourly"
    PER_CLASS = "Per Class"


class FeePaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    BANK = "Bank"
    CARD = "Card"


class SalaryPaymentMode(str, Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    CHEQUE = "Cheque"
