"""Parameter binding for prepared statements.

Fills a statement's positional placeholders either from an ordered sequence of
scalar values or from named properties extracted off an arbitrary object.

When validation is on, the statement's declared placeholder count is compared
with the number of supplied values before any ``bind`` call, so a mismatch
never leaves a statement half-bound.

Property extraction is the only place reflection is used. Supported sources,
in lookup order:

- mappings (``source[name]``)
- ``PropertySource`` objects (``source.get(name)``)
- anything else via attribute access (plain attributes, properties,
  dataclasses, pydantic models)

Tags:
    binding, parameters, prepared-statement, dbrunner

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from dbrunner.core.errors import BinderConfigurationError, ParameterCountMismatchError
from dbrunner.core.protocols import PropertySource, Statement


@dataclass(frozen=True)
class BeanParameters:
    """Parameters taken from ``source`` by property name, in ``names`` order.

    Accepted anywhere a parameter sequence is:

        >>> runner.update("update person set name = ? where id = ?",
        ...               BeanParameters(person, ("name", "id")))
    """

    source: Any
    names: tuple[str | None, ...]

    def __init__(self, source: Any, names: Sequence[str | None]):
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "names", tuple(names))

    def values(self) -> tuple[Any, ...]:
        return extract_properties(self.source, self.names)


def extract_properties(source: Any, names: Sequence[str | None]) -> tuple[Any, ...]:
    """Read ``names`` off ``source`` in order.

    Raises:
        BinderConfigurationError: A name is None or does not resolve.
    """
    values = []
    for index, name in enumerate(names):
        if name is None:
            raise BinderConfigurationError(
                f"Property name at index {index} is None",
                property_name=None,
            )
        values.append(_read_property(source, name))
    return tuple(values)


def _read_property(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        try:
            return source[name]
        except KeyError:
            raise BinderConfigurationError(
                f"{type(source).__name__} has no key {name!r}", property_name=name
            ) from None

    if isinstance(source, PropertySource):
        try:
            return source.get(name)
        except (KeyError, AttributeError) as e:
            raise BinderConfigurationError(
                f"{type(source).__name__} cannot resolve property {name!r}",
                property_name=name,
                cause=e,
            ) from e

    try:
        return getattr(source, name)
    except AttributeError as e:
        raise BinderConfigurationError(
            f"{type(source).__name__} has no property {name!r}",
            property_name=name,
            cause=e,
        ) from e


def resolve_parameters(params: Sequence[Any] | BeanParameters | None) -> tuple[Any, ...]:
    """Normalize a parameter argument to a tuple of scalar values.

    A one-element sequence holding a ``BeanParameters`` is expanded too, so
    ``runner.update(sql, BeanParameters(...))`` works with ``*params`` call
    sites.
    """
    if params is None:
        return ()
    if isinstance(params, BeanParameters):
        return params.values()
    if len(params) == 1 and isinstance(params[0], BeanParameters):
        return params[0].values()
    return tuple(params)


def check_parameter_count(
    stmt: Statement, params: Sequence[Any], *, row_index: int | None = None
) -> None:
    """Raise ParameterCountMismatchError unless ``params`` fits ``stmt``."""
    expected = stmt.parameter_count()
    if expected != len(params):
        raise ParameterCountMismatchError(
            expected=expected, actual=len(params), row_index=row_index
        )


def fill_statement(
    stmt: Statement,
    params: Sequence[Any] | BeanParameters | None,
    *,
    validate: bool = True,
) -> None:
    """Bind ``params`` to ``stmt`` at positions 1..N.

    Args:
        stmt: Prepared statement to fill
        params: Scalar values in placeholder order, or BeanParameters
        validate: Compare against ``stmt.parameter_count()`` first

    Raises:
        ParameterCountMismatchError: ``validate`` is on and counts differ
        BinderConfigurationError: A bean property could not be resolved
    """
    values = resolve_parameters(params)
    if validate:
        check_parameter_count(stmt, values)
    for position, value in enumerate(values, start=1):
        stmt.bind(position, value)


def fill_statement_with_bean(
    stmt: Statement,
    bean: Any,
    names: Sequence[str | None],
    *,
    validate: bool = True,
) -> None:
    """Bind the named properties of ``bean`` to ``stmt``, in ``names`` order."""
    fill_statement(stmt, extract_properties(bean, names), validate=validate)


__all__ = [
    "BeanParameters",
    "extract_properties",
    "resolve_parameters",
    "check_parameter_count",
    "fill_statement",
    "fill_statement_with_bean",
]
