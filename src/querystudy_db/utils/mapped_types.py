"""SQLAlchemy mapped type helpers for consistent column definitions."""

from __future__ import annotations

from typing import Annotated

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import mapped_column

__all__ = [
    "Age",
    "Name",
    "OptionalName",
    "Pk",
    "fk",
]

# Primary Key Types
# SQLite and PostgreSQL both autoincrement an integer primary key
Pk = Annotated[
    int,
    mapped_column(
        Integer,
        primary_key=True,
        comment="Primary key",
    ),
]

# String Field Types
Name = Annotated[
    str,
    mapped_column(
        String(128),
        nullable=False,
        index=True,
        comment="Display name",
    ),
]

OptionalName = Annotated[
    str | None,
    mapped_column(
        String(128),
        nullable=True,
        index=True,
        comment="Display name (may be NULL)",
    ),
]

# Numeric Field Types
Age = Annotated[
    int,
    mapped_column(
        Integer,
        nullable=False,
        default=0,
        index=True,
        comment="Age in years",
    ),
]


# Foreign Key Helper
def fk(
    target_table: str,
    target_column: str = "id",
    **kwargs,
):
    """
    Create a foreign key column referencing ``{target_table}.{target_column}``.

    Parameters
    ----------
    target_table : str
        Target table name
    target_column : str, optional
        Referenced column, by default "id"
    **kwargs
        Additional mapped_column arguments

    Returns
    -------
    mapped_column
        Configured foreign key column (integer)

    Examples
    --------
    >>> team_id: Mapped[int | None] = fk("team", nullable=True)

    Notes
    -----
    SQLite only enforces foreign keys when ``PRAGMA foreign_keys=ON``;
    :func:`querystudy_db.db.get_engine` turns it on for every connection.
    """
    kwargs.setdefault("comment", f"Foreign key to {target_table}.{target_column}")
    kwargs.setdefault("index", True)

    return mapped_column(
        ForeignKey(f"{target_table}.{target_column}"),
        **kwargs,
    )
