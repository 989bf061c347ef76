"""dbrunner core -- errors, protocols, logging, and settings.

Architecture::

    errors.py      Typed error taxonomy (DbRunnerError and subclasses)
    protocols.py   Collaborator protocols (DataSource, Connection, Statement, ...)
    logging.py     structlog configuration and helpers
    settings.py    RunnerSettings (pydantic-settings)
"""

from dbrunner.core.errors import DbRunnerError, ErrorCategory, ErrorContext
from dbrunner.core.protocols import (
    Connection,
    DataSource,
    PropertySource,
    ResultHandler,
    ResultSet,
    Statement,
)

__all__ = [
    "DbRunnerError",
    "ErrorCategory",
    "ErrorContext",
    "Connection",
    "DataSource",
    "PropertySource",
    "ResultHandler",
    "ResultSet",
    "Statement",
]
