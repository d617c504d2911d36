"""Sample data seeding.

Creates a fixed set of teams and ``count`` members named
``member0 .. member{count-1}`` whose age equals their index. Members
alternate between teams in order, so with the default two teams the
even-numbered members join the first team.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy import func, select

from querystudy_db.constants import DEFAULT_SEED_COUNT, DEFAULT_TEAM_NAMES
from querystudy_db.db.repository import TeamRepository
from querystudy_db.models.orm import Member, Team

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

__all__ = ["SeedResult", "seed_members"]


@dataclass
class SeedResult:
    """Rows created by :func:`seed_members`."""

    teams_created: int = 0
    members_created: int = 0

    @property
    def skipped(self) -> bool:
        return self.teams_created == 0 and self.members_created == 0


def seed_members(
    session: Session,
    count: int = DEFAULT_SEED_COUNT,
    team_names: Sequence[str] = DEFAULT_TEAM_NAMES,
) -> SeedResult:
    """
    Populate teams and members (idempotent).

    Missing teams are always created. Members are only created when the
    member table is empty, so running twice does not duplicate data.

    Parameters
    ----------
    session : Session
        Session of the caller's unit of work (not committed here)
    count : int, optional
        Number of members to create, by default 100
    team_names : Sequence[str], optional
        Teams to ensure, by default ("teamA", "teamB")

    Returns
    -------
    SeedResult
        Number of teams and members created

    Raises
    ------
    ValueError
        If ``count`` is negative or ``team_names`` is empty
    """
    if count < 0:
        msg = f"count must be >= 0, got {count}"
        raise ValueError(msg)
    if not team_names:
        msg = "At least one team name is required"
        raise ValueError(msg)

    result = SeedResult()
    repo = TeamRepository(session, Team)

    teams = []
    for name in team_names:
        team = repo.get_by_name(name)
        if team is None:
            team = Team(name=name)
            session.add(team)
            result.teams_created += 1
        teams.append(team)

    existing = session.execute(select(func.count(Member.id))).scalar_one()
    if existing:
        logger.info(f"Member table already has {existing} rows, skipping member seed")
    else:
        session.add_all(
            Member(username=f"member{i}", age=i, team=teams[i % len(teams)])
            for i in range(count)
        )
        result.members_created = count

    session.flush()
    logger.info(
        f"Seeded {result.teams_created} teams and {result.members_created} members"
    )
    return result
