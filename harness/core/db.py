"""
Database gateway for fixture setup and API-vs-DB cross checks.

Keeps ONE process-wide SQLAlchemy connection, created lazily from the
``db.url`` / ``db.username`` / ``db.password`` settings and serialised
behind a lock. DB usage here is test fixtures and assertions, not
throughput, so there is no pool; concurrent DB-heavy scenarios would need
one.

The gateway never raises to step code. When the database cannot be reached
queries return an empty ``QueryResult`` marked UNAVAILABLE and updates
return 0, so a missing database downgrades coverage instead of failing the
run.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Any, overload

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from harness.core.config import ConfigStore, get_config

logger = logging.getLogger(__name__)

_gateway: DatabaseGateway | None = None
_gateway_lock = threading.Lock()

MIXED_PARAMS_ERROR = "Use either positional or named parameters, not both"


class GatewayState(str, Enum):
    """Lifecycle of the shared connection."""

    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"
    CLOSED = "closed"


class QueryStatus(str, Enum):
    """Why a query result looks the way it does."""

    OK = "ok"
    UNAVAILABLE = "unavailable"  # no connection could be made
    FAILED = "failed"  # the statement itself raised


class QueryResult(Sequence[dict[str, Any]]):
    """
    Rows returned by ``execute_query``.

    Behaves as a plain sequence of row dicts (column order preserved) and is
    empty whenever the status is not OK. ``status`` and ``error`` let callers
    tell "no such row" apart from "database down" or "bad SQL".
    """

    def __init__(
        self,
        rows: Sequence[dict[str, Any]] = (),
        status: QueryStatus = QueryStatus.OK,
        error: str | None = None,
    ):
        self._rows = list(rows)
        self.status = status
        self.error = error

    @classmethod
    def unavailable(cls) -> QueryResult:
        return cls(status=QueryStatus.UNAVAILABLE)

    @classmethod
    def failed(cls, error: str) -> QueryResult:
        return cls(status=QueryStatus.FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.status == QueryStatus.OK

    def first(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None

    @overload
    def __getitem__(self, index: int) -> dict[str, Any]: ...

    @overload
    def __getitem__(self, index: slice) -> list[dict[str, Any]]: ...

    def __getitem__(self, index):
        return self._rows[index]

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._rows)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryResult):
            return self._rows == other._rows and self.status == other.status
        if isinstance(other, list):
            return self._rows == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"QueryResult(status={self.status.value}, rows={len(self._rows)})"


def normalize_db_url(raw_url: str) -> str:
    """
    Turn a configured connection string into a SQLAlchemy URL string.

    - ``jdbc:`` prefixes are dropped
    - plain ``postgresql://`` / ``postgres://`` use the psycopg (v3) driver
    """
    url = raw_url.strip()
    if url.lower().startswith("jdbc:"):
        url = url[len("jdbc:") :]

    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


class DatabaseGateway:
    """Single shared connection with graceful degradation."""

    def __init__(self, config: ConfigStore | None = None):
        self._config = config
        self._engine: Engine | None = None
        self._connection: Connection | None = None
        self._state = GatewayState.UNINITIALIZED
        self._lock = threading.RLock()

    @property
    def config(self) -> ConfigStore:
        return self._config if self._config is not None else get_config()

    @property
    def state(self) -> GatewayState:
        return self._state

    def _build_url(self) -> URL:
        raw_url = self.config.get("db.url")
        if not raw_url or not raw_url.strip():
            raise ValueError("db.url is not configured")

        url = make_url(normalize_db_url(raw_url))
        username = self.config.get("db.username")
        password = self.config.get("db.password")
        if username:
            url = url.set(username=username)
        if password:
            url = url.set(password=password)
        return url

    def _is_live(self) -> bool:
        conn = self._connection
        return conn is not None and not conn.closed and not conn.invalidated

    def get_connection(self) -> Connection | None:
        """
        Return the shared connection, opening it if needed.

        Returns None (never raises) when the database cannot be reached.
        """
        with self._lock:
            if self._is_live():
                return self._connection

            try:
                url = self._build_url()
                logger.info("Connecting to database: %s", url.render_as_string(hide_password=True))

                connect_args: dict[str, object] = {}
                if url.drivername.startswith("postgresql"):
                    connect_args = {"connect_timeout": 5}
                elif url.drivername.startswith("sqlite"):
                    # one connection shared by every worker thread, access is locked
                    connect_args = {"check_same_thread": False}

                self._dispose_engine()
                self._engine = create_engine(
                    url,
                    poolclass=NullPool,
                    isolation_level="AUTOCOMMIT",
                    connect_args=connect_args,
                )
                self._connection = self._engine.connect()
            except Exception as e:
                logger.warning(
                    "Could not connect to database: %s. DB steps will be skipped.", e
                )
                self._dispose_engine()
                self._connection = None
                self._state = GatewayState.UNAVAILABLE
                return None

            self._state = GatewayState.CONNECTED
            logger.info("Database connection established")
            return self._connection

    def is_available(self) -> bool:
        """True when a live connection exists or can be opened now."""
        return self.get_connection() is not None

    def execute_query(self, sql: str, *params: Any, **named: Any) -> QueryResult:
        """
        Run a SELECT and return its rows.

        Positional ``params`` are bound with the driver's own placeholder
        style (``%s`` for psycopg, ``?`` for sqlite); keyword ``named``
        params use ``:name`` binds. Values are never formatted into the SQL.
        """
        logger.info("Executing query: %s", sql)

        with self._lock:
            conn = self.get_connection()
            if conn is None:
                logger.warning("No DB connection. Returning empty results.")
                return QueryResult.unavailable()
            if params and named:
                logger.error("Query mixes positional and named parameters: %s", sql)
                return QueryResult.failed(MIXED_PARAMS_ERROR)

            try:
                result = self._execute(conn, sql, params, named)
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
            except SQLAlchemyError as e:
                logger.error("Query execution failed: %s", e)
                return QueryResult.failed(str(e))

        logger.info("Query returned %d rows", len(rows))
        return QueryResult(rows)

    def execute_update(self, sql: str, *params: Any, **named: Any) -> int:
        """Run an INSERT/UPDATE/DELETE; returns the affected row count (0 on skip or failure)."""
        logger.info("Executing update: %s", sql)

        with self._lock:
            conn = self.get_connection()
            if conn is None:
                logger.warning("No DB connection. Skipping update.")
                return 0
            if params and named:
                logger.error("Update mixes positional and named parameters: %s", sql)
                return 0

            try:
                result = self._execute(conn, sql, params, named)
                affected = max(result.rowcount, 0)
            except SQLAlchemyError as e:
                logger.error("Update execution failed: %s", e)
                return 0

        logger.info("Rows affected: %d", affected)
        return affected

    def get_single_value(self, sql: str, *params: Any, **named: Any) -> Any:
        """First column of the first row, or None."""
        row = self.execute_query(sql, *params, **named).first()
        if row:
            return next(iter(row.values()))
        return None

    def close_connection(self) -> None:
        """Close the shared connection. Safe to call repeatedly."""
        with self._lock:
            conn = self._connection
            self._connection = None
            if conn is not None and not conn.closed:
                try:
                    conn.close()
                    logger.info("Database connection closed")
                except SQLAlchemyError as e:
                    logger.error("Error closing DB connection: %s", e)
            self._dispose_engine()
            if self._state != GatewayState.UNINITIALIZED:
                self._state = GatewayState.CLOSED

    def _dispose_engine(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    @staticmethod
    def _execute(conn: Connection, sql: str, params: tuple[Any, ...], named: dict[str, Any]):
        if named:
            return conn.execute(text(sql), named)
        if params:
            return conn.exec_driver_sql(sql, tuple(params))
        return conn.exec_driver_sql(sql)


def get_gateway() -> DatabaseGateway:
    """Return the process-wide gateway, creating it on first use."""
    global _gateway

    if _gateway is not None:
        return _gateway

    with _gateway_lock:
        if _gateway is None:
            _gateway = DatabaseGateway()
    return _gateway
