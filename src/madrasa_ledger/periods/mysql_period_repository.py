from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import MonthlyLock
from .repository import MonthlyLockRepository

SELECT_ALL_SQL = """
    SELECT period_month, is_closed, closed_by, closed_at
    FROM monthly_status
    ORDER BY period_month ASC
"""


def row_to_lock(r: dict) -> MonthlyLock:
    is_closed = bool(r.get("is_closed"))
    return MonthlyLock(
        period_month=str(r["period_month"]),
        is_closed=is_closed,
        closed_by=r.get("closed_by") if is_closed else None,
        closed_at=r.get("closed_at") if is_closed else None,
    )


class MySQLMonthlyLockRepository(MonthlyLockRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def save(self, lock: MonthlyLock) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO monthly_status(period_month, is_closed, closed_by, closed_at)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_closed=VALUES(is_closed), closed_by=VALUES(closed_by), closed_at=VALUES(closed_at)
                """,
                (lock.period_month, int(lock.is_closed), lock.closed_by, lock.closed_at),
            )
