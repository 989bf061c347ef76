"""SQLAlchemy engine data source.

Uses an ``Engine``'s connection pool as the connection factory. Each
``get_connection()`` checks out a raw DB-API connection with
``engine.raw_connection()``; closing it returns it to the engine's pool
rather than closing the socket.

Usage::

    from dbrunner.adapters.sqlalchemy import EngineDataSource

    source = EngineDataSource.from_url("postgresql+psycopg2://app@db/app", pool_size=5)
    runner = AsyncQueryRunner(ThreadPoolExecutor(max_workers=5), source)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from dbrunner.adapters.dbapi import SUPPORTED_PARAMSTYLES, DBAPIConnection

# SQLAlchemy reports "pyformat" for drivers that also take plain %s
_PARAMSTYLE_ALIASES = {"pyformat": "format"}


class EngineDataSource:
    """``DataSource`` over a SQLAlchemy ``Engine``.

    Args:
        engine: Engine whose pool supplies connections
        autocommit: Commit after each update/batch. The pool rolls back on
            check-in, so uncommitted writes on pool-acquired connections
            would otherwise be lost.

    Raises:
        ValueError: The dialect uses a paramstyle other than qmark or format.
    """

    def __init__(self, engine: Engine, *, autocommit: bool = True) -> None:
        self.engine = engine
        self.autocommit = autocommit
        paramstyle = engine.dialect.paramstyle
        paramstyle = _PARAMSTYLE_ALIASES.get(paramstyle, paramstyle)
        if paramstyle not in SUPPORTED_PARAMSTYLES:
            raise ValueError(
                f"Engine dialect {engine.dialect.name!r} uses paramstyle "
                f"{engine.dialect.paramstyle!r}; expected one of {SUPPORTED_PARAMSTYLES}"
            )
        self.paramstyle = paramstyle

    @classmethod
    def from_url(cls, url: str, *, autocommit: bool = True, **engine_kwargs: Any) -> EngineDataSource:
        engine = create_engine(url, **engine_kwargs)
        try:
            return cls(engine, autocommit=autocommit)
        except ValueError:
            engine.dispose()
            raise

    def get_connection(self) -> DBAPIConnection:
        raw = self.engine.raw_connection()
        return DBAPIConnection(raw, paramstyle=self.paramstyle, autocommit=self.autocommit)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"EngineDataSource({self.engine.url!r})"
