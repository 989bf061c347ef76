"""
Shared pytest fixtures and configuration for dbrunner tests.

This module provides:
- Mock collaborators (data source, connection, statement, result set) wired
  together the way a driver would be
- A single-worker pool for dispatch tests
- Location-based markers (adapters/ → integration)

Usage:
    def test_something(runner, data_source, conn, stmt):
        stmt.parameter_count.return_value = 2
        runner.update("update blah set ? = ?", "unit", "test").get()
"""

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest

# Ensure dbrunner package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dbrunner.execution import AsyncQueryRunner
from dbrunner.handlers import ArrayHandler


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "adapters" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Mock collaborators
# =============================================================================


@pytest.fixture
def results() -> MagicMock:
    """Empty result set."""
    rs = MagicMock(name="results")
    rs.__iter__.return_value = iter([])
    rs.description = [("a",), ("b",)]
    return rs


@pytest.fixture
def stmt(results: MagicMock) -> MagicMock:
    """Statement declaring two placeholders."""
    s = MagicMock(name="stmt")
    s.parameter_count.return_value = 2
    s.execute_query.return_value = results
    s.execute_update.return_value = 1
    s.execute_batch.return_value = [1, 1]
    return s


@pytest.fixture
def conn(stmt: MagicMock) -> MagicMock:
    c = MagicMock(name="conn")
    c.prepare.return_value = stmt
    return c


@pytest.fixture
def data_source(conn: MagicMock) -> MagicMock:
    ds = MagicMock(name="data_source")
    ds.get_connection.return_value = conn
    return ds


@pytest.fixture
def handler() -> ArrayHandler:
    return ArrayHandler()


# =============================================================================
# Worker pool
# =============================================================================


@pytest.fixture
def pool() -> Generator[ThreadPoolExecutor, None, None]:
    executor = ThreadPoolExecutor(max_workers=1)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def runner(pool: ThreadPoolExecutor, data_source: MagicMock) -> AsyncQueryRunner:
    return AsyncQueryRunner(pool, data_source)
