from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import SystemSettings
from .repository import SettingsRepository

_SINGLETON_ID = 1

SELECT_SQL = f"""
    SELECT {", ".join(SystemSettings.field_names())}
    FROM system_settings
    WHERE id={_SINGLETON_ID}
"""


def row_to_settings(r: Optional[dict]) -> Optional[SystemSettings]:
    if not r:
        return None
    return SystemSettings(**{name: r[name] for name in SystemSettings.field_names()})


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def save(self, settings: SystemSettings) -> None:
        names = SystemSettings.field_names()
        values = settings.to_dict()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO system_settings(id, {", ".join(names)})
                VALUES(%s, {", ".join(["%s"] * len(names))})
                ON DUPLICATE KEY UPDATE {", ".join(f"{n}=VALUES({n})" for n in names)}
                """,
                (_SINGLETON_ID, *[values[n] for n in names]),
            )
