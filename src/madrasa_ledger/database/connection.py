from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import mysql.connector

from ..core.constants import DEFAULT_CONNECT_TIMEOUT_SECONDS, DEFAULT_STORE_TIMEOUT_SECONDS
from ..core.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS
    statement_timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT_SECONDS)),
            statement_timeout=float(db_config.get("statement_timeout", DEFAULT_STORE_TIMEOUT_SECONDS)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation (safe for simple Flask apps).
    Every connection gets a connect timeout and a per-statement execution cap,
    so no call into MySQL can hang the caller.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        try:
            conn = mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=int(self._config.connect_timeout),
            )
        except mysql.connector.Error as e:
            logger.error("MySQL connect failed (%s@%s:%s): %s", self._config.user, self._config.host, self._config.port, e)
            raise SourceUnavailable("Database is unreachable") from e

        cur = conn.cursor()
        try:
            # MAX_EXECUTION_TIME caps read-only SELECTs, in milliseconds.
            cur.execute("SET SESSION MAX_EXECUTION_TIME=%s", (int(self._config.statement_timeout * 1000),))
            cur.execute("SET SESSION innodb_lock_wait_timeout=%s", (max(1, int(self._config.statement_timeout)),))
        finally:
            cur.close()
        return conn
