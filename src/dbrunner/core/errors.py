"""
Structured error types for dbrunner.

Every failure an operation can produce is a typed ``DbRunnerError`` with a
category, structured context (operation kind, SQL text, request id) and an
optional chained cause. Failures raised on a worker thread travel through an
``AsyncResult`` and are re-raised verbatim to whoever awaits it, so the type
and message of an error are the whole contract with the caller.

Manifesto:
    - **Typed taxonomy:** One class per failure kind the runner can report
    - **Rich Context:** Errors carry the SQL and parameters that failed
    - **Error Chaining:** Driver exceptions are preserved as ``cause``
    - **No retry semantics:** The runner never retries; errors only describe

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       DbRunnerError                              │
        │  (category, context, cause)                                      │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ValidationError              ConnectionUnavailableError         │
        │  (VALIDATION)                 (CONNECTION)                       │
        │       │                                                          │
        │  InvalidSqlError              BinderConfigurationError           │
        │  ParameterCountMismatchError  (CONFIG)                           │
        │  InvalidBatchArgumentsError                                      │
        │  MissingResultHandlerError    StatementExecutionError            │
        │                               (EXECUTION)                        │
        │  ResultHandlerError                                              │
        │  (HANDLER)                    ResourceReleaseError               │
        │                               (RESOURCE)                         │
        │  DispatchError                                                   │
        │  (DISPATCH)                                                      │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Wrapping a driver failure:

    >>> try:
    ...     raise sqlite3.OperationalError("no such table: blah")
    ... except sqlite3.Error as e:
    ...     raise StatementExecutionError("execute failed", cause=e).with_context(
    ...         sql="select * from blah"
    ...     )
    Traceback (most recent call last):
    ...
    StatementExecutionError: execute failed

    Reporting a mismatch:

    >>> err = ParameterCountMismatchError(expected=2, actual=1)
    >>> err.message
    'Wrong number of parameters: expected 2, was given 1'

Guardrails:
    ❌ DON'T: Raise bare Exception from the execution layer
    ✅ DO: Raise the DbRunnerError subclass that names the failure kind

    ❌ DON'T: Swallow the driver exception when wrapping it
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, dbrunner

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories used for classification in logs.

    Attributes:
        VALIDATION: Request rejected before touching the database
        CONFIG: Binder or runner misconfiguration
        CONNECTION: No usable connection could be obtained
        EXECUTION: Driver/engine reported a failure
        HANDLER: Caller-supplied result handler raised
        RESOURCE: Closing a cursor, statement, or connection failed
        DISPATCH: The worker pool refused the unit of work
        INTERNAL: Unexpected state
    """

    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    CONNECTION = "CONNECTION"
    EXECUTION = "EXECUTION"
    HANDLER = "HANDLER"
    RESOURCE = "RESOURCE"
    DISPATCH = "DISPATCH"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Any additional metadata can be stored in ``metadata``. ``to_dict()``
    serializes the non-None fields for logging.

    Attributes:
        operation: Operation kind (``query``, ``update``, ``batch``)
        sql: SQL text the operation was running
        request_id: Identifier of the submitted request
        metadata: Additional key-value pairs (parameters, row index, ...)
    """

    operation: str | None = None
    sql: str | None = None
    request_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "sql", "request_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DbRunnerError(Exception):
    """
    Base exception for all dbrunner errors.

    All instances carry:
    - **category:** ErrorCategory for classification
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` to describe their failure kind.

    Examples:
        >>> error = DbRunnerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = DbRunnerError("Bad request").with_context(sql="select 1")
        >>> error.context.sql
        'select 1'

        >>> d = DbRunnerError("Test", category=ErrorCategory.VALIDATION).to_dict()
        >>> d["category"]
        'VALIDATION'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DbRunnerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StatementExecutionError("Failed").with_context(
                sql="select * from blah",
                params=("unit", "test"),
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(DbRunnerError):
    """Request rejected before any statement was executed."""

    default_category = ErrorCategory.VALIDATION


class InvalidSqlError(ValidationError):
    """SQL text was None or blank."""

    def __init__(self, message: str = "Null or empty SQL statement", **kwargs: Any):
        super().__init__(message, **kwargs)


class ParameterCountMismatchError(ValidationError):
    """
    Supplied parameter count differs from the statement's placeholder count.

    For batches ``row_index`` names the first mismatching row; the whole batch
    is rejected before anything is staged.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        expected: int,
        actual: int,
        row_index: int | None = None,
        **kwargs: Any,
    ):
        if message is None:
            message = f"Wrong number of parameters: expected {expected}, was given {actual}"
            if row_index is not None:
                message = f"{message} (batch row {row_index})"
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual
        self.row_index = row_index

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["expected"] = self.expected
        result["actual"] = self.actual
        if self.row_index is not None:
            result["row_index"] = self.row_index
        return result


class InvalidBatchArgumentsError(ValidationError):
    """Batch parameter rows were None or empty."""

    def __init__(self, message: str = "Batch parameter rows must be a non-empty sequence", **kwargs: Any):
        super().__init__(message, **kwargs)


class MissingResultHandlerError(ValidationError):
    """A query was submitted without a result handler."""

    def __init__(self, message: str = "Null result handler", **kwargs: Any):
        super().__init__(message, **kwargs)


# =============================================================================
# CONFIGURATION / CONNECTION ERRORS
# =============================================================================


class BinderConfigurationError(DbRunnerError):
    """A named property could not be resolved on the source object."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, message: str, *, property_name: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.property_name = property_name


class ConnectionUnavailableError(DbRunnerError):
    """No usable connection: factory missing, returned None, or raised."""

    default_category = ErrorCategory.CONNECTION


# =============================================================================
# EXECUTION ERRORS
# =============================================================================


class StatementExecutionError(DbRunnerError):
    """The driver reported a failure while preparing, binding, or executing."""

    default_category = ErrorCategory.EXECUTION


class ResultHandlerError(DbRunnerError):
    """The caller-supplied result handler raised while processing rows."""

    default_category = ErrorCategory.HANDLER


class ResourceReleaseError(DbRunnerError):
    """
    Closing a cursor, statement, or connection failed.

    Only reported when the operation itself succeeded; after a primary failure
    release errors are logged and dropped.
    """

    default_category = ErrorCategory.RESOURCE

    def __init__(self, message: str, *, resource: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.resource = resource


class DispatchError(DbRunnerError):
    """The worker pool refused a unit of work (e.g. it was shut down)."""

    default_category = ErrorCategory.DISPATCH


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DbRunnerError",
    "ValidationError",
    "InvalidSqlError",
    "ParameterCountMismatchError",
    "InvalidBatchArgumentsError",
    "MissingResultHandlerError",
    "BinderConfigurationError",
    "ConnectionUnavailableError",
    "StatementExecutionError",
    "ResultHandlerError",
    "ResourceReleaseError",
    "DispatchError",
]
