"""Member query execution and projection.

:class:`MemberQuery` runs statements inside a session owned by the
caller. Search results are :class:`~querystudy_db.models.schemas.MemberTeamDto`
rows built from scalar columns, never live ``Member``/``Team`` objects,
so they stay valid after the session closes.

Architecture:
- Predicates come from :mod:`querystudy_db.query.conditions`
- ``Member`` is LEFT OUTER JOINed to ``Team`` so team-less members are kept
- Ordering is always explicit (default: member id ascending)
- Bulk UPDATE/DELETE bypass the session identity map; see :class:`BulkResult`

Examples
--------
>>> with get_session(engine) as session:
...     query = MemberQuery(session)
...     rows = query.search(MemberSearchCondition(team_name="teamB", age_goe=35))
>>> [row.username for row in rows]
['member4']
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import String, case, cast, delete, func, literal, select, update
from sqlalchemy.exc import IntegrityError, UnboundExecutionError
from sqlalchemy.orm import aliased, contains_eager

from querystudy_db.constants import AGE_BANDS, AGE_WORDS, NullsOrder, SortDirection, SortKey
from querystudy_db.errors import ConfigurationError, ConstraintViolation, NotFoundError
from querystudy_db.models.orm import Member, Team
from querystudy_db.models.schemas import (
    AgeStats,
    MemberDto,
    MemberSearchCondition,
    MemberTeamDto,
    TeamAgeStats,
    UserDto,
)
from querystudy_db.query.conditions import conditions_for, where
from querystudy_db.query.paging import OrderSpec, Page, PageRequest, normalize_order

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.elements import ColumnElement

__all__ = [
    "BulkResult",
    "MemberQuery",
]

# Sort key -> column of the joined member/team statement
_SORT_COLUMNS = {
    SortKey.MEMBER_ID: Member.id,
    SortKey.USERNAME: Member.username,
    SortKey.AGE: Member.age,
    SortKey.TEAM_ID: Member.team_id,
    SortKey.TEAM_NAME: Team.name,
}


@dataclass
class BulkResult:
    """
    Outcome of a bulk UPDATE or DELETE.

    The statement ran directly against the database. Member objects
    already loaded in the session still hold their old state until
    :meth:`invalidate` is called; ``stale`` stays True until then.

    Attributes
    ----------
    affected : int
        Number of rows the statement matched
    stale : bool
        Whether the session may still hold pre-mutation state
    """

    affected: int
    session: Session = field(repr=False)
    stale: bool = True

    def invalidate(self) -> None:
        """Flush pending changes and expire every loaded object in the session."""
        self.session.flush()
        self.session.expire_all()
        self.stale = False
        logger.debug("Session state expired after bulk mutation")


class MemberQuery:
    """
    Search, aggregate and bulk-mutate members within a unit of work.

    Parameters
    ----------
    session : Session
        Session bound to an engine; its transaction is owned by the caller

    Raises
    ------
    ConfigurationError
        If ``session`` is None or not bound to an engine

    Examples
    --------
    >>> query = MemberQuery(session)
    >>> query.search_paged(
    ...     MemberSearchCondition(),
    ...     offset=1,
    ...     limit=2,
    ...     order=OrderSpec("username", "desc"),
    ... )
    """

    def __init__(self, session: Session | None) -> None:
        if session is None:
            msg = "MemberQuery requires an active session (unit of work)"
            raise ConfigurationError(msg)
        try:
            session.get_bind()
        except UnboundExecutionError as exc:
            msg = "MemberQuery session is not bound to an engine"
            raise ConfigurationError(msg) from exc
        self.session = session

    # ------------------------------------------------------------------
    # Statement builders
    # ------------------------------------------------------------------

    @staticmethod
    def _projection_stmt() -> Select:
        """Member LEFT JOIN team, selecting the MemberTeamDto columns."""
        return (
            select(
                Member.id.label("member_id"),
                Member.username.label("username"),
                Member.age.label("age"),
                Team.id.label("team_id"),
                Team.name.label("team_name"),
            )
            .select_from(Member)
            .outerjoin(Member.team)
        )

    @staticmethod
    def _order_by(order: Sequence[OrderSpec]) -> list[ColumnElement[Any]]:
        clauses = []
        for spec in order:
            column = _SORT_COLUMNS[spec.key]
            clause = column.desc() if spec.direction is SortDirection.DESC else column.asc()
            clause = clause.nulls_first() if spec.nulls is NullsOrder.FIRST else clause.nulls_last()
            clauses.append(clause)
        return clauses

    def _build_search(
        self,
        criteria: MemberSearchCondition | None,
        order: OrderSpec | Sequence[OrderSpec] | None,
    ) -> Select:
        criteria = criteria or MemberSearchCondition()
        stmt = where(self._projection_stmt(), *conditions_for(criteria))
        return stmt.order_by(*self._order_by(normalize_order(order)))

    @staticmethod
    def _project(rows) -> list[MemberTeamDto]:
        return [MemberTeamDto.model_validate(row._asdict()) for row in rows]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        criteria: MemberSearchCondition | None = None,
        order: OrderSpec | Sequence[OrderSpec] | None = None,
    ) -> list[MemberTeamDto]:
        """
        Members matching every present field of ``criteria``.

        Parameters
        ----------
        criteria : MemberSearchCondition | None, optional
            Filters; None or an all-absent condition returns every member
        order : OrderSpec | Sequence[OrderSpec] | None, optional
            Sort keys, by default member id ascending

        Returns
        -------
        list[MemberTeamDto]
            Detached rows; empty when nothing matches

        Notes
        -----
        An all-absent condition is an unbounded full scan. It is allowed,
        but callers should prefer :meth:`search_paged` for it.
        """
        if criteria is None or criteria.is_empty:
            logger.warning("Unbounded member search: no criteria and no limit")
        stmt = self._build_search(criteria, order)
        logger.debug(f"search: {stmt}")
        rows = self._project(self.session.execute(stmt))
        logger.debug(f"search returned {len(rows)} rows")
        return rows

    def search_paged(
        self,
        criteria: MemberSearchCondition | None,
        offset: int,
        limit: int,
        order: OrderSpec | Sequence[OrderSpec] | None = None,
    ) -> list[MemberTeamDto]:
        """
        One window of :meth:`search` results.

        Parameters
        ----------
        criteria : MemberSearchCondition | None
            Filters
        offset : int
            Zero-based index of the first row returned
        limit : int
            Maximum number of rows
        order : OrderSpec | Sequence[OrderSpec] | None, optional
            Sort keys, by default member id ascending

        Raises
        ------
        ConfigurationError
            If ``order`` is an empty sequence
        ValueError
            If ``offset`` < 0 or ``limit`` <= 0
        """
        request = PageRequest(offset=offset, limit=limit, order=normalize_order(order))
        stmt = (
            self._build_search(criteria, request.order)
            .offset(request.offset)
            .limit(request.limit)
        )
        logger.debug(f"search_paged(offset={offset}, limit={limit}): {stmt}")
        return self._project(self.session.execute(stmt))

    def count(self, criteria: MemberSearchCondition | None = None) -> int:
        """Number of members matching ``criteria``."""
        criteria = criteria or MemberSearchCondition()
        stmt = where(
            select(func.count(Member.id)).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        )
        return self.session.execute(stmt).scalar_one()

    def page(
        self,
        criteria: MemberSearchCondition | None,
        request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """
        One page of results with the total count.

        Runs two statements: the windowed search and a separate count.
        """
        content = self.search_paged(criteria, request.offset, request.limit, request.order)
        return Page(
            content=content,
            total=self.count(criteria),
            offset=request.offset,
            limit=request.limit,
            order=request.order,
        )

    def fetch_one(self, criteria: MemberSearchCondition) -> MemberTeamDto:
        """
        The single member matching ``criteria``.

        Raises
        ------
        NotFoundError
            If no member matches
        sqlalchemy.exc.MultipleResultsFound
            If more than one member matches
        """
        row = self.session.execute(self._build_search(criteria, None)).one_or_none()
        if row is None:
            msg = f"No member matches {criteria!r}"
            raise NotFoundError(msg)
        return MemberTeamDto.model_validate(row._asdict())

    def find_members(
        self,
        criteria: MemberSearchCondition | None = None,
        order: OrderSpec | Sequence[OrderSpec] | None = None,
        with_team: bool = False,
    ) -> list[Member]:
        """
        Member entities matching ``criteria``.

        Unlike :meth:`search` this returns session-bound ORM objects. Use
        it when the caller needs identity-map semantics.

        Parameters
        ----------
        criteria : MemberSearchCondition | None, optional
            Filters
        order : OrderSpec | Sequence[OrderSpec] | None, optional
            Sort keys, by default member id ascending
        with_team : bool, optional
            Populate ``Member.team`` from the join instead of lazy loading
        """
        criteria = criteria or MemberSearchCondition()
        stmt = select(Member).outerjoin(Member.team)
        stmt = where(stmt, *conditions_for(criteria))
        stmt = stmt.order_by(*self._order_by(normalize_order(order)))
        if with_team:
            stmt = stmt.options(contains_eager(Member.team))
        return list(self.session.execute(stmt).scalars().all())

    def member_dtos(self, criteria: MemberSearchCondition | None = None) -> list[MemberDto]:
        """Username/age projection ordered by member id."""
        criteria = criteria or MemberSearchCondition()
        stmt = where(
            select(Member.username, Member.age).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        ).order_by(Member.id)
        return [MemberDto.model_validate(row._asdict()) for row in self.session.execute(stmt)]

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def _age_aggregates() -> tuple[ColumnElement[Any], ...]:
        return (
            func.count(Member.id).label("count"),
            func.sum(Member.age).label("sum"),
            func.avg(Member.age).label("avg"),
            func.max(Member.age).label("max"),
            func.min(Member.age).label("min"),
        )

    def age_stats(self, criteria: MemberSearchCondition | None = None) -> AgeStats:
        """Count, sum, average, max and min age of the matching members."""
        criteria = criteria or MemberSearchCondition()
        stmt = where(
            select(*self._age_aggregates()).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        )
        row = self.session.execute(stmt).one()
        return AgeStats.model_validate(row._asdict())

    def team_age_stats(
        self, criteria: MemberSearchCondition | None = None
    ) -> list[TeamAgeStats]:
        """
        Age aggregates grouped by team.

        Returns one entry per team that has at least one matching member,
        ordered by team name. Members without a team are not counted.
        """
        criteria = criteria or MemberSearchCondition()
        stmt = (
            select(
                Team.id.label("team_id"),
                Team.name.label("team_name"),
                *self._age_aggregates(),
            )
            .select_from(Member)
            .join(Member.team)
        )
        stmt = (
            where(stmt, *conditions_for(criteria))
            .group_by(Team.id, Team.name)
            .order_by(Team.name)
        )
        rows = self.session.execute(stmt).all()
        logger.debug(f"team_age_stats returned {len(rows)} groups")
        return [TeamAgeStats.model_validate(row._asdict()) for row in rows]

    # ------------------------------------------------------------------
    # Subqueries and expressions
    # ------------------------------------------------------------------

    def oldest_members(self) -> list[Member]:
        """Members whose age equals the maximum age."""
        member_sub = aliased(Member)
        max_age = select(func.max(member_sub.age)).scalar_subquery()
        stmt = select(Member).where(Member.age == max_age).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def members_at_least_average_age(self) -> list[Member]:
        """Members at or above the average age."""
        member_sub = aliased(Member)
        avg_age = select(func.avg(member_sub.age)).scalar_subquery()
        stmt = select(Member).where(Member.age >= avg_age).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def members_with_age_in_subquery(self, older_than: int) -> list[Member]:
        """Members whose age appears among ages strictly greater than ``older_than``."""
        member_sub = aliased(Member)
        ages = select(member_sub.age).where(member_sub.age > older_than)
        stmt = select(Member).where(Member.age.in_(ages)).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def user_dtos(self) -> list[UserDto]:
        """Every member as ``UserDto(name=username, age=<max age of all members>)``."""
        member_sub = aliased(Member)
        stmt = select(
            Member.username.label("name"),
            select(func.max(member_sub.age)).scalar_subquery().label("age"),
        ).order_by(Member.id)
        return [UserDto.model_validate(row._asdict()) for row in self.session.execute(stmt)]

    def members_named_after_teams(self) -> list[Member]:
        """Members whose username equals some team's name (join without a relationship)."""
        stmt = (
            select(Member)
            .join(Team, Member.username == Team.name)
            .order_by(Member.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def age_labels(self, criteria: MemberSearchCondition | None = None) -> list[str]:
        """Age band label per member ("0-20", "21-30", otherwise "other")."""
        criteria = criteria or MemberSearchCondition()
        label = case(
            *((Member.age.between(lower, upper), name) for name, lower, upper in AGE_BANDS),
            else_="other",
        )
        stmt = where(
            select(label).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        ).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def username_with_age(self, criteria: MemberSearchCondition | None = None) -> list[str]:
        """``<username>_<age>`` per member; NULL usernames give None."""
        criteria = criteria or MemberSearchCondition()
        expr = Member.username.concat("_").concat(cast(Member.age, String))
        stmt = where(
            select(expr).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        ).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def members_left_join_teams_by_name(self) -> list[MemberTeamDto]:
        """
        Every member, paired with the team whose name equals its username.

        LEFT OUTER JOIN on ``member.username = team.name`` instead of the
        foreign key, so ``team_id``/``team_name`` describe the name-matched
        team and are None for members without one.
        """
        stmt = (
            select(
                Member.id.label("member_id"),
                Member.username.label("username"),
                Member.age.label("age"),
                Team.id.label("team_id"),
                Team.name.label("team_name"),
            )
            .select_from(Member)
            .outerjoin(Team, Member.username == Team.name)
            .order_by(Member.id)
        )
        return self._project(self.session.execute(stmt))

    def usernames_replaced(self, old: str = "member", new: str = "M") -> list[str | None]:
        """``replace(username, old, new)`` per member, ordered by id."""
        stmt = select(func.replace(Member.username, old, new)).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def lowercase_usernames(self) -> list[str]:
        """Usernames equal to their own ``lower()``."""
        stmt = (
            select(Member.username)
            .where(Member.username == func.lower(Member.username))
            .order_by(Member.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def age_words(self, criteria: MemberSearchCondition | None = None) -> list[str]:
        """Simple CASE on the age value (see ``AGE_WORDS``), else "other"."""
        criteria = criteria or MemberSearchCondition()
        word = case(AGE_WORDS, value=Member.age, else_="other")
        stmt = where(
            select(word).select_from(Member).outerjoin(Member.team),
            *conditions_for(criteria),
        ).order_by(Member.id)
        return list(self.session.execute(stmt).scalars().all())

    def usernames_with_constant(self, constant: str = "A") -> list[tuple[str | None, str]]:
        """``(username, constant)`` per member; the constant is a SQL literal column."""
        stmt = select(Member.username, literal(constant).label("constant")).order_by(Member.id)
        return [tuple(row) for row in self.session.execute(stmt)]

    # ------------------------------------------------------------------
    # Bulk mutation
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_assignments(assignments: Mapping[Any, Any]) -> dict[Any, Any]:
        values = {}
        for key, value in assignments.items():
            if isinstance(key, str):
                if key not in Member.__mapper__.column_attrs or key == "id":
                    msg = f"Cannot assign member attribute {key!r}"
                    raise ValueError(msg)
                key = getattr(Member, key)
            values[key] = value
        if not values:
            msg = "update_where requires at least one assignment"
            raise ValueError(msg)
        return values

    @staticmethod
    def _bulk_target(predicate: ColumnElement[bool] | None) -> ColumnElement[bool] | None:
        # UPDATE/DELETE have no join; match ids through the joined statement
        # so Team fragments (team_name_eq) select the right members.
        # correlate(None) keeps "member" in the subquery FROM list.
        if predicate is None:
            return None
        matching = (
            select(Member.id)
            .outerjoin(Member.team)
            .where(predicate)
            .correlate(None)
        )
        return Member.id.in_(matching)

    def _execute_bulk(self, stmt) -> int:
        try:
            # Push pending ORM changes first so the statement sees them
            self.session.flush()
            result = self.session.execute(
                stmt, execution_options={"synchronize_session": False}
            )
        except IntegrityError as exc:
            raise ConstraintViolation(str(exc.orig)) from exc
        return result.rowcount

    def update_where(
        self,
        predicate: ColumnElement[bool] | None,
        assignments: Mapping[Any, Any],
    ) -> BulkResult:
        """
        Bulk UPDATE members matching ``predicate``.

        Parameters
        ----------
        predicate : ColumnElement[bool] | None
            Any condition fragment, including ones on ``Team`` columns;
            None updates every member
        assignments : Mapping
            Attribute name (or ``Member`` column) to new value or SQL
            expression, e.g. ``{"age": Member.age * 2}``

        Returns
        -------
        BulkResult
            Affected row count. Objects already loaded in the session are
            stale until ``invalidate()`` is called on the result.

        Raises
        ------
        ConstraintViolation
            If the database rejects the update or a pending flush
        ValueError
            If an assignment names an unknown attribute or the primary key
        """
        values = self._resolve_assignments(assignments)
        stmt = where(update(Member), self._bulk_target(predicate)).values(values)
        affected = self._execute_bulk(stmt)
        logger.info(f"Bulk update affected {affected} member rows")
        return BulkResult(affected=affected, session=self.session)

    def delete_where(self, predicate: ColumnElement[bool] | None) -> BulkResult:
        """
        Bulk DELETE members matching ``predicate``.

        Same cache caveat as :meth:`update_where`.
        """
        stmt = where(delete(Member), self._bulk_target(predicate))
        affected = self._execute_bulk(stmt)
        logger.info(f"Bulk delete affected {affected} member rows")
        return BulkResult(affected=affected, session=self.session)

    def invalidate(self) -> None:
        """Flush and expire every object loaded in the session."""
        self.session.flush()
        self.session.expire_all()
