import os
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping, Optional

import structlog
from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine

LOGGER = structlog.get_logger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SCHEMA_DIR = os.path.join(BASE_DIR, "config", "sql")


# ============================================================
# QUERY RESULT
# ============================================================

class QueryResult:
    """Rows (as plain dicts) and affected-row count of one statement."""

    def __init__(self, rows: List[Dict[str, Any]], rowcount: int):
        self.rows = rows
        self.rowcount = rowcount

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


def _run(conn: Connection, sql: str, params: Optional[Mapping[str, Any]]) -> QueryResult:
    if params and conn.dialect.name == "sqlite":
        # sqlite3 cannot bind Decimal
        params = {k: float(v) if isinstance(v, Decimal) else v for k, v in params.items()}

    result = conn.execute(text(sql), dict(params or {}))
    rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
    return QueryResult(rows, result.rowcount)


# ============================================================
# TRANSACTION (one reserved connection)
# ============================================================

class Transaction:
    """Statements issued on the single connection reserved by Database.transaction()."""

    def __init__(self, conn: Connection, name: str):
        self._conn = conn
        self._trans = conn.begin()
        self.name = name
        self.stage = "started"

    @property
    def is_active(self) -> bool:
        return self._trans.is_active

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        return _run(self._conn, sql, params)

    def commit(self) -> None:
        self._trans.commit()
        self.stage = "committed"

    def rollback(self) -> None:
        if self.stage == "rolled_back":
            return
        if self._trans.is_active:
            self._trans.rollback()
        LOGGER.info("transaction_rolled_back", transaction=self.name, stage=self.stage)
        self.stage = "rolled_back"


# ============================================================
# DATABASE HANDLE
# ============================================================

class Database:
    """
    Explicitly constructed data-access handle wrapping a pooled engine.
    Created once per application and closed with dispose() on shutdown.
    """

    def __init__(self, database_url: str, pool_size: int = 5, pool_timeout: int = 30):
        kwargs: Dict[str, Any] = {"pool_pre_ping": True}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_size"] = pool_size
            kwargs["pool_timeout"] = pool_timeout

        self.engine: Engine = create_engine(database_url, **kwargs)

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        LOGGER.info("database_engine_initialized", dialect=self.engine.dialect.name)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        """Run one statement on a pooled connection and commit it."""
        with self.engine.begin() as conn:
            return _run(conn, sql, params)

    @contextmanager
    def transaction(self, name: str = "transaction") -> Iterator[Transaction]:
        """
        Reserve one connection for the whole block.
        Commits on normal exit unless rolled back explicitly; any exception
        rolls back and is re-raised unchanged. The connection always goes
        back to the pool.
        """
        with self.engine.connect() as conn:
            tx = Transaction(conn, name)
            try:
                yield tx
            except Exception:
                tx.rollback()
                raise
            if tx.is_active:
                tx.commit()

    def init_schema(self, path: Optional[str] = None) -> None:
        """Create tables from the dialect's schema file (idempotent)."""
        path = path or os.path.join(SCHEMA_DIR, f"{self.dialect}.sql")
        with open(path, "r") as f:
            statements = [s.strip() for s in f.read().split(";") if s.strip()]

        with self.engine.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))

        LOGGER.info("database_schema_initialized", path=path, statements=len(statements))

    def ping(self) -> bool:
        try:
            self.execute("SELECT 1")
            return True
        except Exception:
            LOGGER.exception("database_ping_failed")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
        LOGGER.info("database_engine_disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ============================================================
# FASTAPI DEPENDENCY
# ============================================================

def get_database(request: Request) -> Database:
    """Return the handle created by create_app()."""
    return request.app.state.db
