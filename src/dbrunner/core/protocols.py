"""
Canonical protocol definitions for dbrunner.

The runner never talks to a driver directly. It consumes a handful of narrow
structural interfaces, and any object with the right shape satisfies them.
Adapters for PEP 249 drivers live in ``dbrunner.adapters``; tests use mocks.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── DataSource       — connection factory (get_connection)
        ├── Connection       — prepare(sql) + close()
        ├── Statement        — placeholder count, bind, execute_*, batch, close
        ├── ResultSet        — forward-only row cursor, must be closed
        ├── ResultHandler    — callable turning a ResultSet into a value
        └── PropertySource   — named-property access for bean binding

    Consumers:
        execution/binder.py, execution/statement.py, execution/runner.py,
        execution/async_runner.py, handlers.py, adapters/*

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts — implementations go in adapters

    ❌ DON'T: Assume a connection is healthy because the factory returned it
    ✅ DO: Let prepare/execute failures surface as execution errors

Tags:
    protocol, connection, statement, database, contracts, dbrunner

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ResultSet(Protocol):
    """
    Live, forward-only row cursor produced by a row-returning statement.

    Iterating yields rows in driver order. ``description`` follows PEP 249
    (a sequence of 7-item column descriptors, first item the column name).
    """

    @property
    def description(self) -> Sequence[Sequence[Any]] | None:
        ...

    def __iter__(self) -> Iterator[Any]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Statement(Protocol):
    """
    A prepared, parameterized statement bound to one connection.

    Positions passed to ``bind`` are 1-based.
    """

    def parameter_count(self) -> int:
        """Number of placeholders declared by the SQL text."""
        ...

    def bind(self, position: int, value: Any) -> None:
        """Bind ``value`` at ``position`` (1-based). ``None`` binds SQL NULL."""
        ...

    def execute_query(self) -> ResultSet:
        """Execute a row-returning statement."""
        ...

    def execute_update(self) -> int:
        """Execute a data-modifying statement; return affected rows."""
        ...

    def add_batch(self) -> None:
        """Stage the currently bound values as one batch row."""
        ...

    def execute_batch(self) -> Sequence[int]:
        """Execute all staged rows; return one count per row."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal connection capability needed by the runner."""

    def prepare(self, sql: str) -> Statement:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class DataSource(Protocol):
    """
    Connection factory.

    May return ``None`` or raise when no connection is available; the runner
    reports both as ``ConnectionUnavailableError``.
    """

    def get_connection(self) -> Connection | None:
        ...


@runtime_checkable
class ResultHandler(Protocol[T_co]):
    """Turns an open ResultSet into a value. Invoked once per query."""

    def __call__(self, rs: ResultSet) -> T_co:
        ...


@runtime_checkable
class PropertySource(Protocol):
    """Object exposing its bindable properties by name."""

    def get(self, name: str) -> Any:
        ...


__all__ = [
    "ResultSet",
    "Statement",
    "Connection",
    "DataSource",
    "ResultHandler",
    "PropertySource",
]
