"""Tests for dbrunner.core.errors module."""

import pytest

from dbrunner.core.errors import (
    BinderConfigurationError,
    ConnectionUnavailableError,
    DbRunnerError,
    DispatchError,
    ErrorCategory,
    ErrorContext,
    InvalidBatchArgumentsError,
    InvalidSqlError,
    MissingResultHandlerError,
    ParameterCountMismatchError,
    ResourceReleaseError,
    ResultHandlerError,
    StatementExecutionError,
    ValidationError,
)


class TestErrorContext:
    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.sql is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(operation="query", sql="select 1", metadata={"params": [1]})
        d = ctx.to_dict()
        assert d == {"operation": "query", "sql": "select 1", "params": [1]}
        assert "request_id" not in d


class TestDbRunnerError:
    def test_defaults(self):
        error = DbRunnerError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"
        assert error.category == ErrorCategory.INTERNAL
        assert error.cause is None

    def test_with_context_fluent(self):
        error = DbRunnerError("failed").with_context(sql="select 1", params=("a",))
        assert error.context.sql == "select 1"
        assert error.context.metadata["params"] == ("a",)

    def test_cause_chained(self):
        original = OSError("refused")
        error = ConnectionUnavailableError("no connection", cause=original)
        assert error.cause is original
        assert error.__cause__ is original

    def test_to_dict(self):
        error = StatementExecutionError("execute failed", cause=RuntimeError("x")).with_context(
            sql="select 1", request_id="abcd1234"
        )
        d = error.to_dict()
        assert d["error_type"] == "StatementExecutionError"
        assert d["category"] == "EXECUTION"
        assert d["context"] == {"sql": "select 1", "request_id": "abcd1234"}
        assert d["cause"] == "RuntimeError('x')"

    def test_repr(self):
        assert repr(InvalidSqlError()) == "InvalidSqlError('Null or empty SQL statement', category=VALIDATION)"


class TestTaxonomy:
    @pytest.mark.parametrize(
        "error, category",
        [
            (InvalidSqlError(), ErrorCategory.VALIDATION),
            (InvalidBatchArgumentsError(), ErrorCategory.VALIDATION),
            (MissingResultHandlerError(), ErrorCategory.VALIDATION),
            (ParameterCountMismatchError(expected=2, actual=1), ErrorCategory.VALIDATION),
            (BinderConfigurationError("x", property_name="a"), ErrorCategory.CONFIG),
            (ConnectionUnavailableError("x"), ErrorCategory.CONNECTION),
            (StatementExecutionError("x"), ErrorCategory.EXECUTION),
            (ResultHandlerError("x"), ErrorCategory.HANDLER),
            (ResourceReleaseError("x", resource="statement"), ErrorCategory.RESOURCE),
            (DispatchError("x"), ErrorCategory.DISPATCH),
        ],
    )
    def test_categories(self, error, category):
        assert error.category == category
        assert isinstance(error, DbRunnerError)

    def test_validation_errors_share_base(self):
        assert issubclass(InvalidSqlError, ValidationError)
        assert issubclass(ParameterCountMismatchError, ValidationError)
        assert not issubclass(StatementExecutionError, ValidationError)


class TestParameterCountMismatchError:
    def test_message(self):
        error = ParameterCountMismatchError(expected=2, actual=3)
        assert error.message == "Wrong number of parameters: expected 2, was given 3"

    def test_batch_row_message(self):
        error = ParameterCountMismatchError(expected=2, actual=1, row_index=4)
        assert error.message.endswith("(batch row 4)")
        d = error.to_dict()
        assert d["row_index"] == 4
        assert d["expected"] == 2
        assert d["actual"] == 1
