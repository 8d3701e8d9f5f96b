from __future__ import annotations

from dataclasses import dataclass

import mysql.connector

from ..core.constants import DEFAULT_CONNECT_TIMEOUT_SECONDS
from ..core.exceptions import ConnectivityError


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, raw: dict) -> "DBConfig":
        return cls(
            host=str(raw.get("host", "localhost")),
            port=int(raw.get("port", 3306)),
            user=str(raw.get("user", "root")),
            password=str(raw.get("password", "")),
            database=str(raw["database"]),
            connection_timeout=int(raw.get("connection_timeout", DEFAULT_CONNECT_TIMEOUT_SECONDS)),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """DB connection factory for one MySQL database.

    Note: We create short-lived connections per operation. One instance per
    database (target attendance DB, Hikvision source DB).
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=int(self._config.connection_timeout),
            )
        except mysql.connector.Error as exc:
            raise ConnectivityError(f"Cannot connect to {self._config.describe()}: {exc}") from exc
