from __future__ import annotations

from ..core.enums import LedgerKind, SettlementStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, normalize_money, normalize_mysql_date
from .model import LedgerTransaction
from .repository import LedgerRepository

SELECT_FEES_SQL = """
    SELECT id, student_id, amount_paid, payment_date, for_month, payment_mode,
           reference, payment_status, receipt_no
    FROM fee_records
    ORDER BY seq ASC
"""

SELECT_SALARIES_SQL = """
    SELECT id, teacher_id, amount, salary_month, status, payment_date, payment_mode,
           reference, receipt_no
    FROM salary_records
    ORDER BY seq ASC
"""


def row_to_fee(r: dict) -> LedgerTransaction:
    return LedgerTransaction(
        transaction_id=str(r["id"]),
        kind=LedgerKind.FEE,
        subject_id=str(r["student_id"]),
        amount=normalize_money(r["amount_paid"]),
        transaction_date=normalize_mysql_date(r["payment_date"]),
        period_month=str(r["for_month"]),
        payment_mode=r["payment_mode"],
        receipt_no=r["receipt_no"],
        resulting_status=SettlementStatus(r["payment_status"]),
        reference=r.get("reference"),
    )


def row_to_salary(r: dict) -> LedgerTransaction:
    return LedgerTransaction(
        transaction_id=str(r["id"]),
        kind=LedgerKind.SALARY,
        subject_id=str(r["teacher_id"]),
        amount=normalize_money(r["amount"]),
        transaction_date=normalize_mysql_date(r["payment_date"]),
        period_month=str(r["salary_month"]),
        payment_mode=r["payment_mode"],
        receipt_no=r["receipt_no"],
        resulting_status=SettlementStatus(r["status"]),
        reference=r.get("reference"),
    )


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, txn: LedgerTransaction) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if txn.kind == LedgerKind.FEE:
                cur.execute(
                    """
                    INSERT INTO fee_records(
                        id, student_id, amount_paid, payment_date, for_month,
                        payment_mode, reference, payment_status, receipt_no
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        txn.transaction_id,
                        txn.subject_id,
                        txn.amount,
                        txn.transaction_date,
                        txn.period_month,
                        txn.payment_mode,
                        txn.reference,
                        txn.resulting_status.value,
                        txn.receipt_no,
                    ),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO salary_records(
                        id, teacher_id, amount, salary_month, status,
                        payment_date, payment_mode, reference, receipt_no
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        txn.transaction_id,
                        txn.subject_id,
                        txn.amount,
                        txn.period_month,
                        txn.resulting_status.value,
                        txn.transaction_date,
                        txn.payment_mode,
                        txn.reference,
                        txn.receipt_no,
                    ),
                )
