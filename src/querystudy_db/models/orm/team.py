"""Team model: the parent side of the member/team relationship."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, relationship

from querystudy_db.models.orm.base import Base
from querystudy_db.utils import Name, Pk

if TYPE_CHECKING:
    from querystudy_db.models.orm.member import Member


class Team(Base):
    """
    Team that members belong to.

    Attributes
    ----------
    id : int
        Integer primary key
    name : str
        Unique team name (teamA, teamB, ...)
    members : list[Member]
        Members assigned to this team (inverse of ``Member.team``)
    """

    __tablename__ = "team"

    id: Mapped[Pk]

    name: Mapped[Name]

    # Relationships
    members: Mapped[list[Member]] = relationship(back_populates="team")

    __table_args__ = (UniqueConstraint("name", name="uq_team_name"),)

    def __repr__(self) -> str:
        # Relationship attributes are left out so repr never triggers a lazy load
        return f"Team(id={self.id!r}, name={self.name!r})"
