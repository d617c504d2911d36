"""SQLAlchemy 2.0 ORM models for querystudy_db.

Split into logical modules:
- base.py - Declarative base class
- team.py - Team (parent entity)
- member.py - Member (child entity, many-to-one to Team)
"""

from __future__ import annotations

from querystudy_db.models.orm.base import Base
from querystudy_db.models.orm.member import Member
from querystudy_db.models.orm.team import Team

__all__ = [
    "Base",
    "Member",
    "Team",
]
