"""pytest configuration for querystudy_db tests."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from querystudy_db.db import create_db_and_tables, get_engine
from querystudy_db.models.orm import Member, Team


@pytest.fixture
def engine():
    """Create in-memory SQLite engine with all tables."""
    engine = get_engine("sqlite:///:memory:")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create SQLAlchemy session for testing."""
    with Session(engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def teams(session):
    """teamA and teamB, committed."""
    team_a = Team(name="teamA")
    team_b = Team(name="teamB")
    session.add_all([team_a, team_b])
    session.commit()
    return team_a, team_b


@pytest.fixture
def members(session, teams):
    """Four members across two teams, committed.

    teamA: member1 (10), member2 (20)
    teamB: member3 (30), member4 (40)
    """
    team_a, team_b = teams
    members = [
        Member(username="member1", age=10, team=team_a),
        Member(username="member2", age=20, team=team_a),
        Member(username="member3", age=30, team=team_b),
        Member(username="member4", age=40, team=team_b),
    ]
    session.add_all(members)
    session.commit()
    return members
