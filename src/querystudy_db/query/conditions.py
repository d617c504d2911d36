"""Predicate fragments built from optional search criteria.

Each builder maps one criteria field to one SQL condition, or to ``None``
when the field is absent. ``None`` is the identity for :func:`combine`,
so callers never have to check fields one by one::

    stmt = where(select(Member), *conditions_for(criteria))

Builders do no I/O. Fragments that reference ``Team`` need a statement
joined to ``Member.team``. Bulk UPDATE/DELETE in
:class:`~querystudy_db.query.executor.MemberQuery` accept any fragment;
they match rows through a joined id subquery.
"""

from __future__ import annotations

from functools import reduce
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import and_

from querystudy_db.models.orm import Member, Team

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

    from querystudy_db.models.schemas import MemberSearchCondition

__all__ = [
    "age_between",
    "age_eq",
    "age_goe",
    "age_loe",
    "all_conditions",
    "combine",
    "conditions_for",
    "team_name_eq",
    "username_eq",
    "where",
]

S = TypeVar("S")


def username_eq(username: str | None) -> ColumnElement[bool] | None:
    """``member.username = :username``, or None when absent."""
    return Member.username == username if username is not None else None


def team_name_eq(team_name: str | None) -> ColumnElement[bool] | None:
    """``team.name = :team_name``, or None when absent."""
    return Team.name == team_name if team_name is not None else None


def age_goe(age: int | None) -> ColumnElement[bool] | None:
    """``member.age >= :age``, or None when absent."""
    return Member.age >= age if age is not None else None


def age_loe(age: int | None) -> ColumnElement[bool] | None:
    """``member.age <= :age``, or None when absent."""
    return Member.age <= age if age is not None else None


def age_eq(age: int | None) -> ColumnElement[bool] | None:
    """``member.age = :age``, or None when absent."""
    return Member.age == age if age is not None else None


def age_between(lower: int | None, upper: int | None) -> ColumnElement[bool] | None:
    """Inclusive age range; either bound may be absent."""
    return combine(age_goe(lower), age_loe(upper))


def combine(*fragments: ColumnElement[bool] | None) -> ColumnElement[bool] | None:
    """
    AND together the present fragments.

    Parameters
    ----------
    *fragments : ColumnElement[bool] | None
        Conditions; None entries are skipped

    Returns
    -------
    ColumnElement[bool] | None
        The single present fragment, their conjunction, or None when
        nothing is present (no constraint)

    Examples
    --------
    >>> combine(None, None) is None
    True
    >>> str(combine(age_goe(10), None, age_loe(20)))
    'member.age >= :age_1 AND member.age <= :age_2'
    """
    present = [fragment for fragment in fragments if fragment is not None]
    if not present:
        return None
    return reduce(lambda left, right: and_(left, right), present)


def conditions_for(criteria: MemberSearchCondition) -> list[ColumnElement[bool]]:
    """
    Fragments for every present field of ``criteria``.

    Parameters
    ----------
    criteria : MemberSearchCondition
        Search criteria

    Returns
    -------
    list[ColumnElement[bool]]
        Zero to four conditions, in field order
    """
    fragments = (
        username_eq(criteria.username),
        team_name_eq(criteria.team_name),
        age_goe(criteria.age_goe),
        age_loe(criteria.age_loe),
    )
    return [fragment for fragment in fragments if fragment is not None]


def all_conditions(criteria: MemberSearchCondition) -> ColumnElement[bool] | None:
    """Conjunction of all present fragments of ``criteria`` (None if empty)."""
    return combine(*conditions_for(criteria))


def where(stmt: S, *fragments: ColumnElement[bool] | None) -> S:
    """
    Apply the combined fragments to a SELECT/UPDATE/DELETE statement.

    Returns ``stmt`` unchanged when no fragment is present.
    """
    condition = combine(*fragments)
    if condition is None:
        return stmt
    return stmt.where(condition)
