"""
dbrunner - Asynchronous SQL execution with strict resource ownership.

Runs synchronous query/update/batch operations on a bounded worker pool and
returns a handle for each. Statements are always closed; connections are
closed only when the runner acquired them.
"""

__version__ = "0.1.0"

from dbrunner.core.errors import (
    BinderConfigurationError,
    ConnectionUnavailableError,
    DbRunnerError,
    DispatchError,
    InvalidBatchArgumentsError,
    InvalidSqlError,
    MissingResultHandlerError,
    ParameterCountMismatchError,
    ResourceReleaseError,
    ResultHandlerError,
    StatementExecutionError,
)
from dbrunner.core.settings import RunnerSettings
from dbrunner.execution import (
    AsyncQueryRunner,
    AsyncResult,
    BeanParameters,
    OperationKind,
    OperationRequest,
    QueryRunner,
    ResultState,
)

__all__ = [
    "__version__",
    "AsyncQueryRunner",
    "AsyncResult",
    "BeanParameters",
    "OperationKind",
    "OperationRequest",
    "QueryRunner",
    "ResultState",
    "RunnerSettings",
    "BinderConfigurationError",
    "ConnectionUnavailableError",
    "DbRunnerError",
    "DispatchError",
    "InvalidBatchArgumentsError",
    "InvalidSqlError",
    "MissingResultHandlerError",
    "ParameterCountMismatchError",
    "ResourceReleaseError",
    "ResultHandlerError",
    "StatementExecutionError",
]
