"""Operation requests — what to run, against which connection.

An ``OperationRequest`` is built on the caller's thread and handed to a worker
unchanged. It carries no behavior; ``QueryRunner.execute`` interprets it.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dbrunner.core.protocols import Connection, ResultHandler
from dbrunner.execution.binder import BeanParameters


class OperationKind(str, Enum):
    QUERY = "query"
    UPDATE = "update"
    BATCH = "batch"


def _request_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class OperationRequest:
    """One submitted operation.

    Attributes:
        kind: Query, update, or batch
        sql: SQL text (validated by the worker, may be None here)
        params: Positional values, or a single BeanParameters (query/update)
        rows: Parameter rows (batch only), kept as given; the worker
            normalizes them and rejects None, empty or non-iterable rows
        handler: Result handler (query only)
        connection: Caller-owned connection, or None to acquire one
        request_id: Short id used in logs and error context
    """

    kind: OperationKind
    sql: str | None
    params: tuple[Any, ...] = ()
    rows: Sequence[Sequence[Any] | BeanParameters] | None = None
    handler: ResultHandler[Any] | None = None
    connection: Connection | None = None
    request_id: str = field(default_factory=_request_id)

    @classmethod
    def query(
        cls,
        sql: str | None,
        handler: ResultHandler[Any] | None,
        *params: Any,
        connection: Connection | None = None,
    ) -> OperationRequest:
        return cls(
            OperationKind.QUERY, sql, params=params, handler=handler, connection=connection
        )

    @classmethod
    def update(
        cls, sql: str | None, *params: Any, connection: Connection | None = None
    ) -> OperationRequest:
        return cls(OperationKind.UPDATE, sql, params=params, connection=connection)

    @classmethod
    def batch(
        cls,
        sql: str | None,
        rows: Sequence[Sequence[Any] | BeanParameters] | None,
        *,
        connection: Connection | None = None,
    ) -> OperationRequest:
        return cls(
            OperationKind.BATCH,
            sql,
            rows=rows,
            connection=connection,
        )

    def log_fields(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "kind": self.kind.value,
            "caller_connection": self.connection is not None,
        }
