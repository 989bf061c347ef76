"""PEP 249 adapter.

Wraps a raw DB-API 2.0 connection so it satisfies the
:class:`~dbrunner.core.protocols.Connection` protocol.

DB-API has no prepared-statement object and no parameter metadata, so
``DBAPIStatement`` provides both: it counts placeholders in the SQL text
(skipping quoted literals and comments), records ``bind`` calls, and runs the
statement through a cursor on execute.

Usage::

    import sqlite3
    from dbrunner.adapters.dbapi import DBAPIConnection

    conn = DBAPIConnection(sqlite3.connect(":memory:"))
    stmt = conn.prepare("select ? + ?")
    stmt.parameter_count()          # 2
    stmt.bind(1, 40)
    stmt.bind(2, 2)
    rs = stmt.execute_query()
    list(rs)                        # [(42,)]
    rs.close()
    stmt.close()
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

SUPPORTED_PARAMSTYLES = ("qmark", "format")

# Rows pulled per fetchmany() call; PEP 249 defaults arraysize to 1
DEFAULT_FETCH_SIZE = 500


def count_placeholders(sql: str, paramstyle: str = "qmark") -> int:
    """Count positional placeholders in ``sql``.

    ``qmark`` counts ``?``; ``format`` counts ``%s`` (``%%`` is a literal
    percent). Placeholders inside quoted literals, quoted identifiers,
    ``--`` line comments and ``/* */`` block comments are ignored.
    """
    if paramstyle not in SUPPORTED_PARAMSTYLES:
        raise ValueError(
            f"Unsupported paramstyle {paramstyle!r}; expected one of {SUPPORTED_PARAMSTYLES}"
        )

    count = 0
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch in ("'", '"', "`"):
            # Doubled quote is an escaped quote inside the literal
            i += 1
            while i < n:
                if sql[i] == ch:
                    if i + 1 < n and sql[i + 1] == ch:
                        i += 2
                        continue
                    break
                i += 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 1
        elif paramstyle == "qmark" and ch == "?":
            count += 1
        elif paramstyle == "format" and ch == "%":
            nxt = sql[i + 1] if i + 1 < n else ""
            if nxt == "s":
                count += 1
            if nxt in ("s", "%"):
                i += 1
        i += 1
    return count


class CursorResultSet:
    """Adapter: DB-API cursor → ``ResultSet`` protocol.

    Rows are fetched ``fetch_size`` at a time.
    """

    def __init__(self, cursor: Any, fetch_size: int = DEFAULT_FETCH_SIZE) -> None:
        if fetch_size < 1:
            raise ValueError(f"fetch_size must be >= 1, got {fetch_size}")
        self._cursor = cursor
        self.fetch_size = fetch_size
        self._closed = False

    @property
    def description(self) -> Sequence[Sequence[Any]] | None:
        return self._cursor.description

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Any]:
        while True:
            rows = self._cursor.fetchmany(self.fetch_size)
            if not rows:
                return
            yield from rows

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cursor.close()


class DBAPIStatement:
    """Prepared-statement emulation over a DB-API connection.

    Positions are 1-based. Bound values are sent in position order; a gap in
    the bound positions is left to the driver to reject.
    """

    def __init__(self, connection: DBAPIConnection, sql: str) -> None:
        self._connection = connection
        self.sql = sql
        self._parameter_count = count_placeholders(sql, connection.paramstyle)
        self._bound: dict[int, Any] = {}
        self._batch: list[tuple[Any, ...]] = []
        self._cursors: list[Any] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Statement is closed")

    def _cursor(self) -> Any:
        self._check_open()
        cursor = self._connection.raw.cursor()
        self._cursors.append(cursor)
        return cursor

    def bound_values(self) -> tuple[Any, ...]:
        return tuple(self._bound[position] for position in sorted(self._bound))

    # -- Statement protocol ------------------------------------------------

    def parameter_count(self) -> int:
        return self._parameter_count

    def bind(self, position: int, value: Any) -> None:
        self._check_open()
        if position < 1:
            raise IndexError(f"Parameter positions start at 1, got {position}")
        self._bound[position] = value

    def execute_query(self) -> CursorResultSet:
        cursor = self._cursor()
        cursor.execute(self.sql, self.bound_values())
        return CursorResultSet(cursor)

    def execute_update(self) -> int:
        cursor = self._cursor()
        cursor.execute(self.sql, self.bound_values())
        count = cursor.rowcount
        self._connection.after_write()
        return count

    def add_batch(self) -> None:
        self._check_open()
        self._batch.append(self.bound_values())
        self._bound.clear()

    def execute_batch(self) -> list[int]:
        # One execute per row so every row reports its own count
        cursor = self._cursor()
        counts = []
        for row in self._batch:
            cursor.execute(self.sql, row)
            counts.append(cursor.rowcount)
        self._batch.clear()
        self._connection.after_write()
        return counts

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        cursors, self._cursors = self._cursors, []
        for cursor in cursors:
            cursor.close()


class DBAPIConnection:
    """Adapter: DB-API connection → ``Connection`` protocol.

    Args:
        raw: Any PEP 249 connection
        paramstyle: Placeholder syntax used by the SQL sent to ``raw``
        autocommit: Commit after every update or batch. Data sources turn this
            on for connections they own; leave it off for connections whose
            transactions the caller manages.
    """

    def __init__(self, raw: Any, *, paramstyle: str = "qmark", autocommit: bool = False) -> None:
        if paramstyle not in SUPPORTED_PARAMSTYLES:
            raise ValueError(
                f"Unsupported paramstyle {paramstyle!r}; expected one of {SUPPORTED_PARAMSTYLES}"
            )
        self._raw = raw
        self.paramstyle = paramstyle
        self.autocommit = autocommit

    # -- Connection protocol -----------------------------------------------

    def prepare(self, sql: str) -> DBAPIStatement:
        return DBAPIStatement(self, sql)

    def close(self) -> None:
        self._raw.close()

    # -- transactions ------------------------------------------------------

    def after_write(self) -> None:
        if self.autocommit:
            self._raw.commit()

    def commit(self) -> None:
        self._raw.commit()

    def rollback(self) -> None:
        self._raw.rollback()

    @property
    def raw(self) -> Any:
        """Access the underlying DB-API connection."""
        return self._raw

    def __repr__(self) -> str:
        return f"DBAPIConnection({self._raw!r}, paramstyle={self.paramstyle!r})"


__all__ = [
    "CursorResultSet",
    "DBAPIConnection",
    "DBAPIStatement",
    "DEFAULT_FETCH_SIZE",
    "SUPPORTED_PARAMSTYLES",
    "count_placeholders",
]
