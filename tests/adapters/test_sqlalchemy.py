"""Tests for EngineDataSource (SQLAlchemy engine pool as connection factory)."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, text

from dbrunner.adapters.sqlalchemy import EngineDataSource
from dbrunner.execution import AsyncQueryRunner
from dbrunner.handlers import ArrayHandler, MapListHandler


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'engine.db'}",
        connect_args={"check_same_thread": False},
    )
    with eng.begin() as c:
        c.execute(text("create table item (id integer primary key, label text)"))
    yield eng
    eng.dispose()


class TestEngineDataSource:
    def test_paramstyle_from_dialect(self, engine):
        assert EngineDataSource(engine).paramstyle == "qmark"

    def test_writes_are_committed_before_checkin(self, engine):
        source = EngineDataSource(engine)
        with ThreadPoolExecutor(max_workers=2) as pool:
            runner = AsyncQueryRunner(pool, source)
            counts = runner.batch(
                "insert into item (label) values (?)", [["unit"], ["test"]]
            ).get(5)
            assert counts == [1, 1]

        with engine.connect() as c:
            labels = c.execute(text("select label from item order by id")).scalars().all()
        assert labels == ["unit", "test"]

    def test_query_through_pool(self, engine):
        with engine.begin() as c:
            c.execute(text("insert into item (label) values ('a'), ('b')"))

        with ThreadPoolExecutor(max_workers=2) as pool:
            runner = AsyncQueryRunner(pool, EngineDataSource(engine))
            rows = runner.query("select id, label from item order by id", MapListHandler()).get(5)
            first = runner.query("select label from item where id = ?", ArrayHandler(), 2).get(5)

        assert rows == [{"id": 1, "label": "a"}, {"id": 2, "label": "b"}]
        assert first == ("b",)

    def test_connections_returned_to_pool(self, engine):
        source = EngineDataSource(engine)
        with ThreadPoolExecutor(max_workers=1) as pool:
            runner = AsyncQueryRunner(pool, source)
            for _ in range(3):
                runner.query("select 1", ArrayHandler()).get(5)
        assert engine.pool.checkedout() == 0

    def test_from_url(self, tmp_path):
        source = EngineDataSource.from_url(f"sqlite:///{tmp_path / 'u.db'}")
        try:
            assert "u.db" in repr(source)
        finally:
            source.dispose()

    def test_unsupported_paramstyle_rejected_at_construction(self, tmp_path):
        eng = create_engine(f"sqlite:///{tmp_path / 'named.db'}", paramstyle="named")
        try:
            with pytest.raises(ValueError, match="named"):
                EngineDataSource(eng)
            assert eng.pool.checkedout() == 0
        finally:
            eng.dispose()

    def test_from_url_unsupported_paramstyle(self, tmp_path):
        with pytest.raises(ValueError, match="paramstyle"):
            EngineDataSource.from_url(f"sqlite:///{tmp_path / 'n.db'}", paramstyle="named")
