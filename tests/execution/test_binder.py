"""Tests for parameter binding and property extraction."""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import call

import pytest
from pydantic import BaseModel

from dbrunner.core.errors import BinderConfigurationError, ParameterCountMismatchError
from dbrunner.execution.binder import (
    BeanParameters,
    extract_properties,
    fill_statement,
    fill_statement_with_bean,
    resolve_parameters,
)


class MyBean:
    def __init__(self):
        self.a = 0
        self._b = 0.0
        self.c = None

    @property
    def b(self) -> float:
        return self._b


@dataclass
class Point:
    x: int
    y: int


class Person(BaseModel):
    name: str
    age: int


class Registry:
    """PropertySource: exposes values through get()."""

    def __init__(self, **values):
        self._values = values

    def get(self, name):
        return self._values[name]


class TestFillStatement:
    def test_binds_in_order(self, stmt):
        fill_statement(stmt, ["unit", "test"])
        assert stmt.bind.call_args_list == [call(1, "unit"), call(2, "test")]

    @pytest.mark.parametrize("params", [[], ["one"], ["a", "b", "c"]])
    def test_mismatch_before_any_bind(self, stmt, params):
        with pytest.raises(ParameterCountMismatchError) as exc_info:
            fill_statement(stmt, params)
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == len(params)
        stmt.bind.assert_not_called()

    def test_zero_declared_zero_supplied(self, stmt):
        stmt.parameter_count.return_value = 0
        fill_statement(stmt, [])
        stmt.bind.assert_not_called()

    def test_none_params_is_empty(self, stmt):
        stmt.parameter_count.return_value = 0
        fill_statement(stmt, None)
        stmt.bind.assert_not_called()

    def test_none_value_binds_null(self, stmt):
        fill_statement(stmt, [None, "x"])
        stmt.bind.assert_any_call(1, None)

    def test_without_validation_metadata_is_not_read(self, stmt):
        fill_statement(stmt, ["a", "b", "c"], validate=False)
        stmt.parameter_count.assert_not_called()
        assert stmt.bind.call_count == 3


class TestExtractProperties:
    def test_plain_object_and_property(self):
        assert extract_properties(MyBean(), ["a", "b", "c"]) == (0, 0.0, None)

    def test_dataclass(self):
        assert extract_properties(Point(1, 2), ["y", "x"]) == (2, 1)

    def test_pydantic_model(self):
        assert extract_properties(Person(name="ada", age=36), ["name", "age"]) == ("ada", 36)

    def test_mapping(self):
        assert extract_properties({"a": 1, "b": 2}, ["b", "a"]) == (2, 1)

    def test_property_source(self):
        assert extract_properties(Registry(a=1), ["a"]) == (1,)

    def test_none_name(self):
        with pytest.raises(BinderConfigurationError, match="index 2"):
            extract_properties(MyBean(), ["a", "b", None])

    def test_unknown_attribute(self):
        with pytest.raises(BinderConfigurationError) as exc_info:
            extract_properties(MyBean(), ["a", "nope"])
        assert exc_info.value.property_name == "nope"

    def test_unknown_mapping_key(self):
        with pytest.raises(BinderConfigurationError):
            extract_properties({"a": 1}, ["b"])

    def test_property_source_lookup_failure(self):
        with pytest.raises(BinderConfigurationError):
            extract_properties(Registry(a=1), ["b"])


class TestBeanBinding:
    def test_fill_statement_with_bean(self, stmt):
        stmt.parameter_count.return_value = 3
        fill_statement_with_bean(stmt, MyBean(), ["a", "b", "c"])
        assert stmt.bind.call_args_list == [call(1, 0), call(2, 0.0), call(3, None)]

    def test_fill_statement_with_bean_none_name(self, stmt):
        stmt.parameter_count.return_value = 3
        with pytest.raises(BinderConfigurationError):
            fill_statement_with_bean(stmt, MyBean(), ["a", "b", None])
        stmt.bind.assert_not_called()

    def test_bean_parameters_resolve(self):
        params = BeanParameters(Point(3, 4), ["x", "y"])
        assert resolve_parameters(params) == (3, 4)
        assert resolve_parameters((params,)) == (3, 4)
        assert params.names == ("x", "y")

    def test_resolve_plain_sequence(self):
        assert resolve_parameters(["a", "b"]) == ("a", "b")
        assert resolve_parameters(None) == ()
