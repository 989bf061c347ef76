"""Result handlers — turn an open ResultSet into a Python value.

Handlers are plain callables; anything with ``__call__(rs)`` works. The runner
closes the result set after the handler returns, so handlers must not keep a
reference to it.

    >>> runner.query("select id, name from person where id = ?", MapHandler(), 1)
    {'id': 1, 'name': 'ada'}
"""

from __future__ import annotations

from typing import Any

from dbrunner.core.protocols import ResultSet


def column_names(rs: ResultSet) -> list[str]:
    return [column[0] for column in rs.description or ()]


def _row_tuple(row: Any) -> tuple[Any, ...]:
    return tuple(row)


class ArrayHandler:
    """First row as a tuple; empty tuple when there are no rows."""

    def __call__(self, rs: ResultSet) -> tuple[Any, ...]:
        for row in rs:
            return _row_tuple(row)
        return ()


class ArrayListHandler:
    """Every row as a tuple."""

    def __call__(self, rs: ResultSet) -> list[tuple[Any, ...]]:
        return [_row_tuple(row) for row in rs]


class MapHandler:
    """First row as a ``{column: value}`` dict, or None."""

    def __call__(self, rs: ResultSet) -> dict[str, Any] | None:
        names = column_names(rs)
        for row in rs:
            return dict(zip(names, _row_tuple(row)))
        return None


class MapListHandler:
    """Every row as a ``{column: value}`` dict."""

    def __call__(self, rs: ResultSet) -> list[dict[str, Any]]:
        names = column_names(rs)
        return [dict(zip(names, _row_tuple(row))) for row in rs]


class _ColumnHandler:
    def __init__(self, column: int | str = 0) -> None:
        self.column = column

    def _index(self, rs: ResultSet) -> int:
        if isinstance(self.column, int):
            return self.column
        names = column_names(rs)
        try:
            return names.index(self.column)
        except ValueError:
            raise KeyError(f"No column named {self.column!r} in {names}") from None


class ScalarHandler(_ColumnHandler):
    """One column of the first row, or None. ``column`` is an index or a name."""

    def __call__(self, rs: ResultSet) -> Any:
        index = self._index(rs)
        for row in rs:
            return _row_tuple(row)[index]
        return None


class ColumnListHandler(_ColumnHandler):
    """One column of every row."""

    def __call__(self, rs: ResultSet) -> list[Any]:
        index = self._index(rs)
        return [_row_tuple(row)[index] for row in rs]


__all__ = [
    "ArrayHandler",
    "ArrayListHandler",
    "MapHandler",
    "MapListHandler",
    "ScalarHandler",
    "ColumnListHandler",
    "column_names",
]
