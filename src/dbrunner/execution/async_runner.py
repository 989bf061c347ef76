"""Async Query Runner — worker-pool dispatch over QueryRunner.

Manifesto:
``QueryRunner`` blocks the caller for the full round trip. ``AsyncQueryRunner``
hands each operation to a fixed-size ``concurrent.futures`` pool and returns an
``AsyncResult`` at once. The submitting thread never touches the database;
every failure, including ones a synchronous call would have raised on the
spot (bad SQL, no connection, wrong parameter count), reaches the caller
only through the handle.

ARCHITECTURE
────────────
::

    AsyncQueryRunner(executor, data_source)
      ├── .submit(request)   ─ enqueue, return AsyncResult
      ├── .query(...)        ─ submit(OperationRequest.query(...))
      ├── .update(...)       ─ submit(OperationRequest.update(...))
      ├── .batch(...)        ─ submit(OperationRequest.batch(...))
      └── .shutdown()        ─ drain the pool (only if built by from_settings)

    worker thread:
      QueryRunner.execute(request)
        ├─ ok    → future result   → AsyncResult COMPLETED
        └─ raise → future exception → AsyncResult FAILED

Related modules:
    runner.py   — the synchronous operations run by each worker
    result.py   — AsyncResult handle
    request.py  — OperationRequest

Tags:
    execution, executor, thread-pool, futures, dbrunner

Doc-Types:
    api-reference
"""

from __future__ import annotations

import contextvars
from collections.abc import Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, TypeVar

from dbrunner.core.errors import DbRunnerError, DispatchError
from dbrunner.core.logging import get_logger
from dbrunner.core.protocols import Connection, DataSource, ResultHandler, Statement
from dbrunner.core.settings import RunnerSettings
from dbrunner.execution.binder import BeanParameters
from dbrunner.execution.request import OperationRequest
from dbrunner.execution.result import AsyncResult
from dbrunner.execution.runner import QueryRunner

logger = get_logger(__name__)

T = TypeVar("T")


class AsyncQueryRunner:
    """Runs query/update/batch operations on a bounded worker pool.

    The pool is the caller's: pass any ``concurrent.futures.Executor`` sized
    for the workload. Operations sharing a caller-owned connection are not
    serialized here; that is the caller's job.

    Example:
        >>> pool = ThreadPoolExecutor(max_workers=4)
        >>> runner = AsyncQueryRunner(pool, SqliteDataSource("app.db"))
        >>> handle = runner.update("update person set name = ? where id = ?", "ada", 1)
        >>> handle.get()
        1
    """

    def __init__(
        self,
        executor: Executor,
        data_source: DataSource | None = None,
        *,
        validate_parameters: bool = True,
    ) -> None:
        """Initialize with a worker pool.

        Args:
            executor: Worker pool shared by all submitted operations
            data_source: Connection factory for calls without ``connection=``
            validate_parameters: Check placeholder counts before binding
        """
        self._executor = executor
        self._runner = QueryRunner(data_source, validate_parameters=validate_parameters)
        self._owns_executor = False

    @classmethod
    def from_settings(
        cls,
        settings: RunnerSettings | None = None,
        data_source: DataSource | None = None,
    ) -> AsyncQueryRunner:
        """Build a runner with its own ``ThreadPoolExecutor``.

        The pool is shut down by ``shutdown()`` or on leaving a ``with`` block.
        """
        settings = settings or RunnerSettings()
        pool = ThreadPoolExecutor(
            max_workers=settings.max_workers,
            thread_name_prefix=settings.thread_name_prefix,
        )
        runner = cls(pool, data_source, validate_parameters=settings.validate_parameters)
        runner._owns_executor = True
        return runner

    @property
    def runner(self) -> QueryRunner:
        """The synchronous runner each worker executes."""
        return self._runner

    @property
    def data_source(self) -> DataSource | None:
        return self._runner.data_source

    @property
    def validate_parameters(self) -> bool:
        return self._runner.validate_parameters

    # ── Binding (synchronous helpers) ───────────────────────────────

    def fill_statement(
        self, stmt: Statement, params: Sequence[Any] | BeanParameters | None
    ) -> None:
        self._runner.fill_statement(stmt, params)

    def fill_statement_with_bean(
        self, stmt: Statement, bean: Any, names: Sequence[str | None]
    ) -> None:
        self._runner.fill_statement_with_bean(stmt, bean, names)

    # ── Dispatch ─────────────────────────────────────────────────────

    def submit(self, request: OperationRequest) -> AsyncResult[Any]:
        """Queue ``request`` on the pool and return its handle immediately.

        Raises:
            DispatchError: The pool refused the work (e.g. already shut down).
                Nothing about the request itself is checked here.
        """
        context = contextvars.copy_context()
        try:
            future = self._executor.submit(context.run, self._execute, request)
        except RuntimeError as e:
            raise DispatchError(f"Worker pool rejected operation: {e}", cause=e).with_context(
                operation=request.kind.value, request_id=request.request_id
            ) from e
        logger.debug("operation.submitted", **request.log_fields())
        return AsyncResult(future, request)

    def _execute(self, request: OperationRequest) -> Any:
        try:
            result = self._runner.execute(request)
        except DbRunnerError as e:
            logger.warning("operation.failed", **request.log_fields(), error=e.to_dict())
            raise
        except Exception as e:
            logger.error("operation.failed", **request.log_fields(), error=repr(e))
            raise
        logger.debug("operation.completed", **request.log_fields())
        return result

    # ── Operations ───────────────────────────────────────────────────

    def query(
        self,
        sql: str | None,
        handler: ResultHandler[T] | None,
        *params: Any,
        connection: Connection | None = None,
    ) -> AsyncResult[T]:
        return self.submit(OperationRequest.query(sql, handler, *params, connection=connection))

    def update(
        self, sql: str | None, *params: Any, connection: Connection | None = None
    ) -> AsyncResult[int]:
        return self.submit(OperationRequest.update(sql, *params, connection=connection))

    def batch(
        self,
        sql: str | None,
        rows: Sequence[Sequence[Any] | BeanParameters] | None,
        *,
        connection: Connection | None = None,
    ) -> AsyncResult[list[int]]:
        return self.submit(OperationRequest.batch(sql, rows, connection=connection))

    # ── Lifecycle ────────────────────────────────────────────────────

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the pool if this runner created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> AsyncQueryRunner:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)


__all__ = ["AsyncQueryRunner"]
