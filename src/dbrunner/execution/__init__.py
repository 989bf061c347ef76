"""dbrunner execution — binding, statement lifecycle, sync and async runners.

ARCHITECTURE
────────────
::

    AsyncQueryRunner.submit(OperationRequest) ─▶ AsyncResult
      │  (worker thread)
      ▼
    QueryRunner.execute(request)
      ├── StatementScope     ─ acquire / prepare / release
      ├── fill_statement     ─ placeholder check + bind
      └── query / update / batch bodies
"""

from .async_runner import AsyncQueryRunner
from .binder import (
    BeanParameters,
    extract_properties,
    fill_statement,
    fill_statement_with_bean,
)
from .request import OperationKind, OperationRequest
from .result import AsyncResult, ResultState
from .runner import QueryRunner
from .statement import ConnectionOwnership, StatementScope, run_with_statement

__all__ = [
    "AsyncQueryRunner",
    "AsyncResult",
    "BeanParameters",
    "ConnectionOwnership",
    "OperationKind",
    "OperationRequest",
    "QueryRunner",
    "ResultState",
    "StatementScope",
    "extract_properties",
    "fill_statement",
    "fill_statement_with_bean",
    "run_with_statement",
]
