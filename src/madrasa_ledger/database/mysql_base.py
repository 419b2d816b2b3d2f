from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..common.validators import to_money
from ..core.exceptions import SourceUnavailable
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True, consistent_snapshot: bool = False):
    """Yield (conn, cursor); commit on success, roll back on any error.

    Connector errors surface as SourceUnavailable so callers handle one kind
    of storage failure.
    """
    conn = conn_factory.connect()
    try:
        if consistent_snapshot:
            conn.start_transaction(consistent_snapshot=True, readonly=True)
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise SourceUnavailable(f"Database operation failed: {e}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_date(value: Any) -> Optional[date]:
    """Normalize MySQL DATE values across connector implementations.

    mysql-connector can return DATE as datetime.date, datetime.datetime
    (DATETIME columns) or a 'YYYY-MM-DD' string.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")


def normalize_money(value: Any) -> Decimal:
    """DECIMAL columns arrive as Decimal; tolerate str/int from other drivers."""
    return to_money(value if value is not None else 0)


def split_csv(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


def join_csv(values) -> Optional[str]:
    items = [str(v).strip() for v in (values or ()) if str(v).strip()]
    return ",".join(items) if items else None
