"""Member model: the child side of the member/team relationship."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, relationship

from querystudy_db.models.orm.base import Base
from querystudy_db.utils import Age, OptionalName, Pk, fk

if TYPE_CHECKING:
    from querystudy_db.models.orm.team import Team


class Member(Base):
    """
    Member record with an optional many-to-one link to a team.

    Attributes
    ----------
    id : int
        Integer primary key
    username : str | None
        Member name; may be NULL (exercised by nulls-last ordering)
    age : int
        Age in years, defaults to 0
    team_id : int | None
        Foreign key to team.id
    team : Team | None
        Owning team, loaded lazily on first access

    Examples
    --------
    >>> team_a = Team(name="teamA")
    >>> member = Member(username="member1", age=10, team=team_a)
    >>> member in team_a.members
    True
    """

    __tablename__ = "member"

    id: Mapped[Pk]

    username: Mapped[OptionalName]

    age: Mapped[Age]

    team_id: Mapped[int | None] = fk("team", nullable=True)

    # Relationships
    team: Mapped[Team | None] = relationship(back_populates="members", lazy="select")

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, username={self.username!r}, age={self.age!r})"
