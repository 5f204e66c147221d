from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import mysql.connector
from mysql.connector.constants import ClientFlag

DEFAULT_DATABASE = "activity_reports"


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = DEFAULT_DATABASE

    @classmethod
    def from_mapping(cls, db_config: Mapping) -> "DBConfig":
        """Build from the ``DB_CONFIG`` dict of a settings module."""
        return cls(
            host=str(db_config.get("host", cls.host)),
            port=int(db_config.get("port", cls.port)),
            user=str(db_config.get("user", cls.user)),
            password=str(db_config.get("password", cls.password)),
            database=str(db_config.get("database", cls.database)),
        )


class DatabaseConnection:
    """Process-wide factory handing out one short-lived connection per unit of work."""

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    def connect(self):
        cfg = self.config
        return mysql.connector.connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
            autocommit=False,
            # rowcount = matched rows, not changed rows.
            client_flags=[ClientFlag.FOUND_ROWS],
        )
