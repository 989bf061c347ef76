"""SQLite data source.

Hands out a fresh ``sqlite3`` connection per ``get_connection()`` call. The
runner closes each one when its operation ends, so every pool-acquired
connection is short-lived.

Note that ``":memory:"`` gives every connection its own empty database; use a
file path when operations without ``connection=`` must see each other's data.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from dbrunner.adapters.dbapi import DBAPIConnection


class SqliteDataSource:
    """``DataSource`` backed by ``sqlite3.connect``.

    Args:
        path: Database file, or ``":memory:"``
        autocommit: Commit after each update/batch on connections handed out
        row_factory: Optional ``sqlite3`` row factory (e.g. ``sqlite3.Row``)
        connect_kwargs: Passed through to ``sqlite3.connect``
    """

    def __init__(
        self,
        path: str | Path = ":memory:",
        *,
        autocommit: bool = True,
        row_factory: Any = None,
        **connect_kwargs: Any,
    ) -> None:
        self.path = str(path)
        self.autocommit = autocommit
        self.row_factory = row_factory
        self._connect_kwargs = {"check_same_thread": False, **connect_kwargs}
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

    def get_connection(self) -> DBAPIConnection:
        raw = sqlite3.connect(self.path, **self._connect_kwargs)
        if self.row_factory is not None:
            raw.row_factory = self.row_factory
        return DBAPIConnection(raw, paramstyle="qmark", autocommit=self.autocommit)

    def __repr__(self) -> str:
        return f"SqliteDataSource({self.path!r})"
