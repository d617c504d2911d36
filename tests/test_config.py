"""Tests for database configuration and the unit of work."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.pool import StaticPool

from querystudy_db.constants import DATABASE_URL_ENV, DEFAULT_DATABASE_URL
from querystudy_db.db import Database, create_db_and_tables, get_database_url, get_engine, get_session
from querystudy_db.models import Team


class TestDatabaseUrl:
    """Test URL resolution order."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
        assert get_database_url() == DEFAULT_DATABASE_URL == "sqlite:///querystudy.db"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///from_env.db")
        assert get_database_url() == "sqlite:///from_env.db"

    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv(DATABASE_URL_ENV, "sqlite:///from_env.db")
        assert get_database_url("sqlite:///explicit.db") == "sqlite:///explicit.db"


class TestEngine:
    """Test engine creation."""

    def test_memory_uses_static_pool(self):
        engine = get_engine("sqlite:///:memory:")
        assert isinstance(engine.pool, StaticPool)
        engine.dispose()

    def test_foreign_keys_enabled(self, engine):
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1

    def test_create_tables_idempotent(self, engine):
        create_db_and_tables(engine)
        create_db_and_tables(engine)


class TestGetSession:
    """Test commit/rollback behaviour of get_session."""

    def test_commits_on_success(self, engine):
        with get_session(engine) as session:
            session.add(Team(name="teamA"))

        with get_session(engine) as session:
            assert session.scalar(select(func.count(Team.id))) == 1

    def test_rolls_back_on_error(self, engine):
        with pytest.raises(RuntimeError):
            with get_session(engine) as session:
                session.add(Team(name="teamA"))
                session.flush()
                raise RuntimeError("boom")

        with get_session(engine) as session:
            assert session.scalar(select(func.count(Team.id))) == 0


class TestDatabase:
    """Test the Database facade."""

    def test_file_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'test.db'}"
        with Database(url) as db:
            assert db.dialect == "sqlite"
            assert db.url == url
            assert db.table_names() == []
            db.create_tables()
            assert sorted(db.table_names()) == ["member", "team"]

            with db.session() as session:
                session.add(Team(name="teamA"))
            with db.session() as session:
                assert session.scalar(select(Team.name)) == "teamA"

    def test_memory_database(self):
        """Test the displayed URL keeps ":memory:" unescaped."""
        with Database("sqlite:///:memory:") as db:
            db.create_tables()
            assert db.url == "sqlite:///:memory:"
            with db.session() as session:
                session.add(Team(name="teamA"))
            with db.session() as session:
                assert session.scalar(select(func.count(Team.id))) == 1
