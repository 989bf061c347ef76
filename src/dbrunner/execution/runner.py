"""Synchronous operation core — query, update, batch.

``QueryRunner`` composes the binder and the statement lifecycle into the three
operation kinds. It blocks the calling thread; ``AsyncQueryRunner`` runs the
very same ``execute`` on a worker pool.

ARCHITECTURE
────────────
::

    QueryRunner(data_source, validate_parameters=True)
      ├── .query(sql, handler, *params, connection=None)  ─ handler(result_set)
      ├── .update(sql, *params, connection=None)          ─ affected rows
      ├── .batch(sql, rows, connection=None)              ─ per-row counts
      └── .execute(request)                               ─ dispatch on kind

    Every call:
      validate request ─▶ StatementScope ─▶ bind ─▶ execute ─▶ release

A request is validated before any connection is acquired: bad SQL, a missing
handler, empty batch rows, or an unresolvable bean property never touch the
data source.

Related modules:
    binder.py        — parameter validation and binding
    statement.py     — connection/statement ownership and release
    async_runner.py  — worker-pool dispatch over this class

Tags:
    execution, query, update, batch, dbrunner

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from dbrunner.core.errors import (
    DbRunnerError,
    InvalidBatchArgumentsError,
    MissingResultHandlerError,
    ResourceReleaseError,
    ResultHandlerError,
)
from dbrunner.core.logging import get_logger
from dbrunner.core.protocols import (
    Connection,
    DataSource,
    ResultHandler,
    ResultSet,
    Statement,
)
from dbrunner.execution.binder import (
    BeanParameters,
    check_parameter_count,
    fill_statement,
    fill_statement_with_bean,
    resolve_parameters,
)
from dbrunner.execution.request import OperationKind, OperationRequest
from dbrunner.execution.statement import driver_errors, run_with_statement, validate_sql

logger = get_logger(__name__)

T = TypeVar("T")


class QueryRunner:
    """Executes SQL synchronously with guaranteed resource cleanup.

    Connections passed as ``connection=`` belong to the caller and are never
    closed. Without one, a connection is taken from ``data_source`` and closed
    when the operation ends, whatever the outcome.

    Example:
        >>> runner = QueryRunner(SqliteDataSource("app.db"))
        >>> runner.update("insert into person (name) values (?)", "ada")
        1
        >>> runner.query("select name from person", ColumnListHandler())
        ['ada']
    """

    def __init__(
        self,
        data_source: DataSource | None = None,
        *,
        validate_parameters: bool = True,
    ) -> None:
        """Initialize the runner.

        Args:
            data_source: Connection factory for calls without ``connection=``
            validate_parameters: Check placeholder counts before binding. When
                off, mismatches surface as driver execution errors.
        """
        self._data_source = data_source
        self.validate_parameters = validate_parameters

    @property
    def data_source(self) -> DataSource | None:
        return self._data_source

    # ── Binding ──────────────────────────────────────────────────────

    def fill_statement(
        self, stmt: Statement, params: Sequence[Any] | BeanParameters | None
    ) -> None:
        fill_statement(stmt, params, validate=self.validate_parameters)

    def fill_statement_with_bean(
        self, stmt: Statement, bean: Any, names: Sequence[str | None]
    ) -> None:
        fill_statement_with_bean(stmt, bean, names, validate=self.validate_parameters)

    # ── Public operations ────────────────────────────────────────────

    def query(
        self,
        sql: str | None,
        handler: ResultHandler[T] | None,
        *params: Any,
        connection: Connection | None = None,
    ) -> T:
        """Run a row-returning statement and return ``handler``'s result."""
        return self.execute(
            OperationRequest.query(sql, handler, *params, connection=connection)
        )

    def update(
        self, sql: str | None, *params: Any, connection: Connection | None = None
    ) -> int:
        """Run an INSERT/UPDATE/DELETE (or DDL) and return affected rows."""
        return self.execute(OperationRequest.update(sql, *params, connection=connection))

    def batch(
        self,
        sql: str | None,
        rows: Sequence[Sequence[Any] | BeanParameters] | None,
        *,
        connection: Connection | None = None,
    ) -> list[int]:
        """Run ``sql`` once per parameter row as one batch.

        Every row is checked before anything is staged, so a bad row means
        nothing runs.
        """
        return self.execute(OperationRequest.batch(sql, rows, connection=connection))

    def execute(self, request: OperationRequest) -> Any:
        """Run ``request`` on the calling thread."""
        if request.kind is OperationKind.QUERY:
            return self._query(request)
        if request.kind is OperationKind.UPDATE:
            return self._update(request)
        if request.kind is OperationKind.BATCH:
            return self._batch(request)
        raise ValueError(f"Unknown operation kind: {request.kind!r}")

    # ── Operation bodies ─────────────────────────────────────────────

    def _run(self, request: OperationRequest, body) -> Any:
        return run_with_statement(
            self._data_source,
            request.connection,
            request.sql,
            body,
            request_id=request.request_id,
        )

    def _bind(self, stmt: Statement, sql: str, values: tuple[Any, ...]) -> None:
        with driver_errors("bind", sql, values):
            fill_statement(stmt, values, validate=self.validate_parameters)

    def _query(self, request: OperationRequest) -> Any:
        sql = validate_sql(request.sql)
        handler = request.handler
        if handler is None:
            raise MissingResultHandlerError()
        values = resolve_parameters(request.params)

        def body(stmt: Statement) -> Any:
            self._bind(stmt, sql, values)
            with driver_errors("execute_query", sql, values):
                rs = stmt.execute_query()
            return self._handle(rs, handler, request)

        return self._run(request, body)

    def _handle(self, rs: ResultSet, handler: ResultHandler[T], request: OperationRequest) -> T:
        try:
            result = handler(rs)
        except DbRunnerError:
            self._close_result_set(rs, request, primary_failed=True)
            raise
        except Exception as e:
            self._close_result_set(rs, request, primary_failed=True)
            raise ResultHandlerError(f"Result handler failed: {e}", cause=e).with_context(
                operation=request.kind.value, sql=request.sql, request_id=request.request_id
            ) from e
        self._close_result_set(rs, request, primary_failed=False)
        return result

    def _close_result_set(
        self, rs: ResultSet, request: OperationRequest, *, primary_failed: bool
    ) -> None:
        try:
            rs.close()
        except Exception as e:
            logger.warning(
                "result_set.close_failed",
                request_id=request.request_id,
                error=repr(e),
                suppressed=primary_failed,
            )
            if not primary_failed:
                raise ResourceReleaseError(
                    f"Failed to close result set: {e}", resource="result_set", cause=e
                ).with_context(sql=request.sql, request_id=request.request_id) from e

    def _update(self, request: OperationRequest) -> int:
        sql = validate_sql(request.sql)
        values = resolve_parameters(request.params)

        def body(stmt: Statement) -> int:
            self._bind(stmt, sql, values)
            with driver_errors("execute_update", sql, values):
                count = stmt.execute_update()
            return max(int(count), 0)

        return self._run(request, body)

    def _batch(self, request: OperationRequest) -> list[int]:
        sql = validate_sql(request.sql)
        rows = [resolve_parameters(row) for row in self._batch_rows(request)]

        def body(stmt: Statement) -> list[int]:
            if self.validate_parameters:
                with driver_errors("parameter metadata", sql):
                    for index, values in enumerate(rows):
                        check_parameter_count(stmt, values, row_index=index)
            for values in rows:
                with driver_errors("add_batch", sql, values):
                    fill_statement(stmt, values, validate=False)
                    stmt.add_batch()
            with driver_errors("execute_batch", sql):
                return list(stmt.execute_batch())

        return self._run(request, body)

    @staticmethod
    def _batch_rows(request: OperationRequest) -> list[Any]:
        """Snapshot ``request.rows``; None, empty or non-iterable is rejected."""
        if request.rows is None or isinstance(request.rows, (str, bytes)):
            raise InvalidBatchArgumentsError()
        try:
            rows = list(request.rows)
        except TypeError as e:
            raise InvalidBatchArgumentsError(
                f"Batch parameter rows must be a non-empty sequence, got {type(request.rows).__name__}",
                cause=e,
            ).with_context(request_id=request.request_id) from e
        if not rows:
            raise InvalidBatchArgumentsError()
        return rows


__all__ = ["QueryRunner"]
