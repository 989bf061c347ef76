"""Adapters from real drivers to the dbrunner protocols.

- ``dbapi``      — any PEP 249 connection (DBAPIConnection)
- ``sqlite``     — SqliteDataSource, one sqlite3 connection per operation
- ``sqlalchemy`` — EngineDataSource, connections from an Engine's pool

``sqlalchemy`` is imported on demand.
"""

from .dbapi import CursorResultSet, DBAPIConnection, DBAPIStatement, count_placeholders
from .sqlite import SqliteDataSource

__all__ = [
    "CursorResultSet",
    "DBAPIConnection",
    "DBAPIStatement",
    "SqliteDataSource",
    "count_placeholders",
]
