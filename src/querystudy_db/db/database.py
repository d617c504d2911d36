"""Database facade: one engine plus a unit-of-work context manager."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING
from urllib.parse import unquote

from sqlalchemy import inspect

from querystudy_db.db.config import create_db_and_tables, get_engine, get_session

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.orm import Session

__all__ = ["Database"]


class Database:
    """
    Engine owner for querystudy_db.

    Parameters
    ----------
    url : str | None, optional
        Database URL; falls back to ``$QUERYSTUDY_DB_URL`` then the
        default SQLite file
    echo : bool, optional
        Echo SQL statements, by default False

    Attributes
    ----------
    engine : Engine
        SQLAlchemy engine
    dialect : str
        Dialect name ("sqlite", "postgresql", ...)

    Examples
    --------
    >>> with Database("sqlite:///:memory:") as db:
    ...     db.create_tables()
    ...     with db.session() as session:
    ...         MemberQuery(session).count(MemberSearchCondition())
    0
    """

    def __init__(self, url: str | None = None, echo: bool = False):
        self.engine = get_engine(url, echo=echo)
        self.dialect = self.engine.dialect.name

    @property
    def url(self) -> str:
        """Database URL for display, with the password masked."""
        # render_as_string percent-escapes the database part (":memory:")
        return unquote(self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Provide a transactional session (the unit of work).

        Yields
        ------
        Session
            Session committed on success, rolled back on exception
        """
        with get_session(self.engine) as session:
            yield session

    def create_tables(self) -> None:
        """Create all ORM tables."""
        create_db_and_tables(self.engine)

    def table_names(self) -> list[str]:
        """Names of the tables currently present in the database."""
        return inspect(self.engine).get_table_names()

    def close(self) -> None:
        """Dispose of pooled connections."""
        self.engine.dispose()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
