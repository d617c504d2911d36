"""Data models for querystudy_db."""

from __future__ import annotations

__all__ = [
    # ORM models
    "Base",
    "Member",
    "Team",
    # Schemas
    "AgeStats",
    "MemberCreate",
    "MemberDto",
    "MemberSearchCondition",
    "MemberTeamDto",
    "TeamAgeStats",
    "TeamCreate",
    "UserDto",
]

from .orm import Base, Member, Team
from .schemas import (
    AgeStats,
    MemberCreate,
    MemberDto,
    MemberSearchCondition,
    MemberTeamDto,
    TeamAgeStats,
    TeamCreate,
    UserDto,
)
