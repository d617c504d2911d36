"""Database package for querystudy_db."""

from __future__ import annotations

__all__ = [
    "Database",
    # Unit of work
    "create_db_and_tables",
    "get_database_url",
    "get_engine",
    "get_session",
    # Repositories
    "BaseRepository",
    "MemberRepository",
    "TeamRepository",
]

from .config import create_db_and_tables, get_database_url, get_engine, get_session
from .database import Database
from .repository import BaseRepository, MemberRepository, TeamRepository
