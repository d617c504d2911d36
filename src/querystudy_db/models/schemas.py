"""Pydantic schemas for search criteria and result projections.

ORM objects (``Member``, ``Team``) stay inside the unit of work that
loaded them. Everything handed back to callers is one of the frozen
models below, built from plain scalar columns of a result row.

Design Pattern
--------------
- Input schemas validate CLI/API input before ORM objects are created
- ``MemberSearchCondition`` carries optional filters; ``None`` means absent
- Projection schemas are frozen and hold scalars only, so a projection
  can never trigger a lazy load after its session is gone

Examples
--------
Search criteria:
    >>> cond = MemberSearchCondition(team_name="teamB", age_goe=35)
    >>> cond.username is None
    True

Projection from a result row:
    >>> row = session.execute(stmt).first()
    >>> MemberTeamDto.model_validate(row._asdict())
    MemberTeamDto(member_id=4, username='member4', age=40, team_id=2, team_name='teamB')
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    # Input schemas
    "MemberCreate",
    "MemberSearchCondition",
    "TeamCreate",
    # Projections
    "AgeStats",
    "MemberDto",
    "MemberTeamDto",
    "TeamAgeStats",
    "UserDto",
]


# ============================================================================
# Input Schemas
# ============================================================================


class TeamCreate(BaseModel):
    """Schema for creating a Team."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Unique team name",
    )


class MemberCreate(BaseModel):
    """
    Schema for creating a Member.

    ``team_name`` is resolved to an existing team by the repository.
    """

    username: str | None = Field(
        None,
        max_length=128,
        description="Member name (may be omitted)",
    )
    age: int = Field(
        0,
        ge=0,
        description="Age in years",
    )
    team_name: str | None = Field(
        None,
        min_length=1,
        max_length=128,
        description="Name of the team to join",
    )


class MemberSearchCondition(BaseModel):
    """
    Optional filters for a member search.

    Every field is independently optional. An absent field adds no
    constraint; a condition with every field absent matches all members.

    Examples
    --------
    >>> MemberSearchCondition(age_goe=35, age_loe=40, team_name="teamB")
    MemberSearchCondition(username=None, team_name='teamB', age_goe=35, age_loe=40)
    """

    model_config = ConfigDict(frozen=True)

    username: str | None = Field(None, description="Exact username")
    team_name: str | None = Field(None, description="Exact team name")
    age_goe: int | None = Field(None, ge=0, description="Minimum age (inclusive)")
    age_loe: int | None = Field(None, ge=0, description="Maximum age (inclusive)")

    @property
    def is_empty(self) -> bool:
        """True when no field is present."""
        return all(value is None for value in self.model_dump().values())


# ============================================================================
# Projections
# ============================================================================


class MemberTeamDto(BaseModel):
    """
    Flat member + team row.

    ``team_id`` and ``team_name`` are None for members without a team.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    member_id: int
    username: str | None
    age: int
    team_id: int | None = None
    team_name: str | None = None


class MemberDto(BaseModel):
    """Username and age only."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    username: str | None
    age: int


class UserDto(BaseModel):
    """Projection whose field names differ from the entity columns."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    name: str | None
    age: int


class AgeStats(BaseModel):
    """
    Aggregate ages over a set of members.

    ``sum``, ``avg``, ``max`` and ``min`` are None when no member matched.
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0)
    sum: int | None = None
    avg: float | None = None
    max: int | None = None
    min: int | None = None

    @model_validator(mode="after")
    def _empty_has_no_aggregates(self) -> AgeStats:
        if self.count == 0 and any(
            value is not None for value in (self.sum, self.avg, self.max, self.min)
        ):
            msg = "aggregates must be None when count is 0"
            raise ValueError(msg)
        return self


class TeamAgeStats(AgeStats):
    """Age aggregates for the members of one team."""

    team_id: int
    team_name: str
