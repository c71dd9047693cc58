from __future__ import annotations

from dataclasses import dataclass

import mysql.connector
from mysql.connector.constants import ClientFlag

UTC_OFFSET = "+00:00"


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "study_room_db")),
        )


class DatabaseConnection:
    """DB connection factory.

    Note: We create short-lived connections per operation, so every repository
    call runs in its own transaction. Sessions are pinned to UTC: column
    defaults from `CURRENT_TIMESTAMP` and values written from Python are both naive UTC.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            # rowcount reports matched rows, so a no-op UPDATE still counts as applied
            client_flags=[ClientFlag.FOUND_ROWS],
            time_zone=UTC_OFFSET,
        )
        if with_database:
            kwargs["database"] = self._config.database
        conn = mysql.connector.connect(**kwargs)
        # Row locks taken with SELECT ... FOR UPDATE are only useful inside
        # an explicit transaction.
        conn.autocommit = False
        return conn
