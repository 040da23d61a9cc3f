from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from mysql.connector import errors, pooling

log = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 10


def db_config_from_dict(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "worktrack")),
        pool_size=int(db_config.get("pool_size", 10)),
    )


def drain_pool(pool: pooling.MySQLConnectionPool) -> int:
    """Disconnect every idle pooled connection; borrowed ones are left alone."""

    drained = 0
    while True:
        try:
            pooled = pool.get_connection()
        except (errors.PoolError, errors.InterfaceError):
            # PoolError: no idle connection left. InterfaceError: a dead one
            # failed to reconnect and went back to the queue.
            return drained
        # Disconnect instead of close(): close() would hand it back to the pool.
        pooled.disconnect()
        drained += 1


class DatabaseConnection:
    """Pooled MySQL connection factory.

    Connections are borrowed per operation and returned to the pool on
    ``close()``. They run in autocommit mode; multi-statement work opts into
    an explicit transaction with ``start_transaction()``.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="worktrack",
                    pool_size=int(self._config.pool_size),
                    pool_reset_session=True,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    autocommit=True,
                )
            return self._pool

    def connect(self):
        return self._get_pool().get_connection()

    def close(self) -> None:
        with self._lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            log.info("Database pool closed (%d idle connection(s) dropped)", drain_pool(pool))
