"""Statement lifecycle — who opens, who closes, and exactly once.

Every operation runs inside a ``StatementScope``:

::

    StatementScope(data_source, connection, sql)
      __enter__
        ├── validate sql            ─ InvalidSqlError, nothing acquired
        ├── connection given?       ─ CALLER ownership, never closed here
        │     else get_connection() ─ POOL ownership, ConnectionUnavailableError
        └── connection.prepare(sql) ─ StatementExecutionError, POOL conn released
      __exit__
        ├── statement.close()       ─ once, even when the body raised
        └── connection.close()      ─ once, POOL ownership only

Release failures never hide the body's exception: they are logged and
dropped. When the body succeeded, the first release failure is raised as
``ResourceReleaseError`` and any later one is logged.

Tags:
    execution, lifecycle, resource-management, dbrunner

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from typing import Any, TypeVar

from dbrunner.core.errors import (
    ConnectionUnavailableError,
    DbRunnerError,
    InvalidSqlError,
    ResourceReleaseError,
    StatementExecutionError,
)
from dbrunner.core.logging import get_logger
from dbrunner.core.protocols import Connection, DataSource, Statement

logger = get_logger(__name__)

T = TypeVar("T")


class ConnectionOwnership(str, Enum):
    """Who is responsible for closing the connection."""

    CALLER = "caller"
    POOL = "pool"


def validate_sql(sql: str | None) -> str:
    if sql is None or not sql.strip():
        raise InvalidSqlError()
    return sql


@contextmanager
def driver_errors(
    action: str, sql: str | None, params: Sequence[Any] = ()
) -> Iterator[None]:
    """Translate driver exceptions raised inside the block.

    ``DbRunnerError`` passes through untouched; anything else becomes a
    ``StatementExecutionError`` carrying the SQL and parameters.
    """
    try:
        yield
    except DbRunnerError:
        raise
    except Exception as e:
        raise StatementExecutionError(
            f"{action} failed: {e} Query: {sql} Parameters: {list(params)}",
            cause=e,
        ).with_context(sql=sql, params=list(params)) from e


class StatementScope:
    """Context manager owning one prepared statement and, maybe, its connection.

    Args:
        data_source: Factory used when ``connection`` is None
        connection: Caller-owned connection, or None to acquire one
        sql: SQL text to prepare
        request_id: Included in log events
    """

    def __init__(
        self,
        data_source: DataSource | None,
        connection: Connection | None,
        sql: str | None,
        *,
        request_id: str | None = None,
    ) -> None:
        self.sql = validate_sql(sql)
        self.request_id = request_id
        self._data_source = data_source
        self.connection = connection
        self.ownership = (
            ConnectionOwnership.CALLER if connection is not None else ConnectionOwnership.POOL
        )
        self.statement: Statement | None = None
        self._statement_closed = False
        self._connection_closed = False

    # ── Acquire ──────────────────────────────────────────────────────

    def _acquire(self) -> Connection:
        if self._data_source is None:
            raise ConnectionUnavailableError(
                "No connection supplied and no data source configured"
            )
        try:
            conn = self._data_source.get_connection()
        except Exception as e:
            raise ConnectionUnavailableError(
                f"Data source failed to provide a connection: {e}", cause=e
            ) from e
        if conn is None:
            raise ConnectionUnavailableError("Data source returned no connection")
        return conn

    def __enter__(self) -> Statement:
        if self.connection is None:
            self.connection = self._acquire()
            logger.debug("connection.acquired", request_id=self.request_id)

        try:
            with driver_errors("prepare", self.sql):
                self.statement = self.connection.prepare(self.sql)
        except BaseException:
            self._release_connection(primary_failed=True)
            raise
        return self.statement

    # ── Release ──────────────────────────────────────────────────────

    def __exit__(self, exc_type, exc, tb) -> bool:
        primary_failed = exc_type is not None
        release_error = self._release_statement(primary_failed)
        connection_error = self._release_connection(
            primary_failed=primary_failed or release_error is not None
        )
        failure = release_error or connection_error
        if failure is not None:
            raise failure
        return False

    def _release_statement(self, primary_failed: bool) -> ResourceReleaseError | None:
        if self._statement_closed or self.statement is None:
            return None
        self._statement_closed = True
        try:
            self.statement.close()
        except Exception as e:
            return self._release_failed("statement", e, primary_failed)
        return None

    def _release_connection(self, primary_failed: bool) -> ResourceReleaseError | None:
        if self.ownership is not ConnectionOwnership.POOL:
            return None
        if self._connection_closed or self.connection is None:
            return None
        self._connection_closed = True
        try:
            self.connection.close()
        except Exception as e:
            return self._release_failed("connection", e, primary_failed)
        logger.debug("connection.released", request_id=self.request_id)
        return None

    def _release_failed(
        self, resource: str, e: Exception, primary_failed: bool
    ) -> ResourceReleaseError | None:
        logger.warning(
            f"{resource}.close_failed",
            request_id=self.request_id,
            error=repr(e),
            suppressed=primary_failed,
        )
        if primary_failed:
            return None
        return ResourceReleaseError(
            f"Failed to close {resource}: {e}", resource=resource, cause=e
        ).with_context(sql=self.sql, request_id=self.request_id)


def run_with_statement(
    data_source: DataSource | None,
    connection: Connection | None,
    sql: str | None,
    body: Callable[[Statement], T],
    *,
    request_id: str | None = None,
) -> T:
    """Prepare ``sql``, run ``body(statement)``, release everything owned."""
    with StatementScope(data_source, connection, sql, request_id=request_id) as stmt:
        return body(stmt)


__all__ = [
    "ConnectionOwnership",
    "StatementScope",
    "driver_errors",
    "run_with_statement",
    "validate_sql",
]
