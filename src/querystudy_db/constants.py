"""Constants and enumerations for querystudy_db."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "AGE_BANDS",
    "AGE_WORDS",
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_SEED_COUNT",
    "DEFAULT_TEAM_NAMES",
    "NullsOrder",
    "SortDirection",
    "SortKey",
]

DATABASE_URL_ENV = "QUERYSTUDY_DB_URL"
DEFAULT_DATABASE_URL = "sqlite:///querystudy.db"

DEFAULT_TEAM_NAMES = ("teamA", "teamB")
DEFAULT_SEED_COUNT = 100

# (label, lower, upper) inclusive bounds used by the CASE age labelling query
AGE_BANDS = (
    ("0-20", 0, 20),
    ("21-30", 21, 30),
)

# Exact age -> word, used by the simple CASE query
AGE_WORDS = {10: "ten", 20: "twenty"}


class SortDirection(str, Enum):
    """Sort direction for an ordering key."""

    ASC = "asc"
    DESC = "desc"


class NullsOrder(str, Enum):
    """Placement of NULL values in an ordered result."""

    FIRST = "first"
    LAST = "last"


class SortKey(str, Enum):
    """Sortable columns of the member/team projection."""

    MEMBER_ID = "member_id"
    USERNAME = "username"
    AGE = "age"
    TEAM_ID = "team_id"
    TEAM_NAME = "team_name"
