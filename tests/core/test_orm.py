"""Tests for the SQLAlchemy ORM layer (base, page_requests table, session)."""

from __future__ import annotations

import datetime

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from pagelog.core.orm import (
    PagelogBase,
    PagelogSession,
    PageRequestTable,
    create_pagelog_engine,
    init_db,
    is_memory_url,
    pagelog_session_factory,
)


class TestSchema:
    def test_table_registered(self):
        assert "page_requests" in PagelogBase.metadata.tables

    def test_columns(self, engine):
        columns = {c["name"]: c for c in inspect(engine).get_columns("page_requests")}
        assert set(columns) == {
            "id",
            "status",
            "http_method",
            "path",
            "http_format",
            "controller_name",
            "action_name",
            "view_runtime",
            "db_runtime",
            "duration",
            "created_at",
            "updated_at",
        }
        assert columns["duration"]["nullable"] is False
        assert columns["view_runtime"]["nullable"] is True
        assert columns["db_runtime"]["nullable"] is True

    def test_init_db_is_idempotent(self, engine):
        init_db(engine)
        assert inspect(engine).has_table("page_requests")


class TestPageRequestTable:
    def test_store_assigns_id_and_timestamps(self, session_factory):
        row = PageRequestTable(status=200, path="/", duration=1.0)
        with session_factory() as session:
            session.add(row)
            session.commit()
        assert row.id is not None
        assert isinstance(row.created_at, datetime.datetime)
        assert isinstance(row.updated_at, datetime.datetime)

    def test_duration_required(self, session_factory):
        with session_factory() as session:
            session.add(PageRequestTable(status=200))
            with pytest.raises(IntegrityError):
                session.commit()

    def test_negative_duration_rejected(self, session_factory):
        with session_factory() as session:
            session.add(PageRequestTable(status=200, duration=-1.0))
            with pytest.raises(IntegrityError):
                session.commit()

    def test_str(self):
        row = PageRequestTable(
            status=200,
            http_method="GET",
            path="/posts/1",
            controller_name="posts",
            action_name="show",
            duration=1.0,
        )
        assert str(row) == "(200) GET '/posts/1' to posts#show"


class TestEngine:
    def test_memory_engine_shares_one_database(self):
        eng = create_pagelog_engine("sqlite:///:memory:")
        init_db(eng)
        with eng.connect() as a, eng.connect() as b:
            assert inspect(a).has_table("page_requests")
            assert inspect(b).has_table("page_requests")
        eng.dispose()

    def test_file_engine_uses_wal(self, tmp_path):
        eng = create_pagelog_engine(f"sqlite:///{tmp_path / 'p.db'}")
        with eng.connect() as conn:
            mode = conn.exec_driver_sql("PRAGMA journal_mode").scalar()
        eng.dispose()
        assert mode == "wal"

    def test_factory_sessions_do_not_expire_on_commit(self, engine):
        with pagelog_session_factory(engine)() as session:
            assert session.expire_on_commit is False

    def test_factory_row_readable_after_session_closes(self, session_factory):
        row = PageRequestTable(path="/a", duration=2.0)
        with session_factory() as session:
            session.add(row)
            session.commit()
        assert row.id is not None
        assert row.created_at is not None

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("sqlite://", True),
            ("sqlite:///:memory:", True),
            ("sqlite:///pagelog.db", False),
            ("postgresql://localhost/pagelog", False),
        ],
    )
    def test_is_memory_url(self, url, expected):
        assert is_memory_url(url) is expected

    def test_session_keeps_values_after_commit(self, engine):
        with PagelogSession(bind=engine) as session:
            row = PageRequestTable(path="/a", duration=2.0)
            session.add(row)
            session.commit()
        assert row.path == "/a"
