"""Repository pattern for data access layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from querystudy_db.errors import ConstraintViolation, NotFoundError

if TYPE_CHECKING:
    from typing import Any

    from sqlalchemy.orm import DeclarativeBase

    from querystudy_db.models.orm import Member, Team
    from querystudy_db.models.schemas import (
        MemberCreate,
        MemberSearchCondition,
        MemberTeamDto,
        TeamCreate,
    )

__all__ = [
    "BaseRepository",
    "MemberRepository",
    "TeamRepository",
]

T = TypeVar("T", bound="DeclarativeBase")


class BaseRepository(Generic[T]):
    """
    Base repository providing CRUD operations.

    Writes flush but never commit; the surrounding unit of work decides.

    Parameters
    ----------
    session : Session
        SQLAlchemy database session
    model_class : type[T]
        ORM model class

    Examples
    --------
    >>> from querystudy_db.models import Team
    >>> repo = BaseRepository(session, Team)
    >>> team = repo.get(1)
    """

    def __init__(self, session: Session, model_class: type[T]) -> None:
        """Initialize repository."""
        self.session = session
        self.model_class = model_class

    def get(self, id_value: Any) -> T | None:
        """
        Get entity by primary key.

        Parameters
        ----------
        id_value : Any
            Primary key value

        Returns
        -------
        T | None
            Entity instance or None if not found
        """
        return self.session.get(self.model_class, id_value)

    def get_or_raise(self, id_value: Any) -> T:
        """
        Get entity by primary key, raising if it does not exist.

        Raises
        ------
        NotFoundError
            If no entity has this primary key
        """
        obj = self.get(id_value)
        if obj is None:
            msg = f"{self.model_class.__name__} {id_value!r} not found"
            raise NotFoundError(msg)
        return obj

    def list(self, **filters: Any) -> list[T]:
        """
        List entities with optional equality filters, ordered by primary key.

        Parameters
        ----------
        **filters : Any
            Field=value filters

        Returns
        -------
        list[T]
            List of matching entities

        Examples
        --------
        >>> members = repo.list(age=10)
        """
        stmt = select(self.model_class)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model_class, key) == value)
        stmt = stmt.order_by(*self.model_class.__mapper__.primary_key)
        return list(self.session.execute(stmt).scalars().all())

    def _flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConstraintViolation(str(exc.orig)) from exc

    def create(self, obj: T) -> T:
        """
        Create new entity.

        Parameters
        ----------
        obj : T
            Entity instance

        Returns
        -------
        T
            Created entity (with DB-generated fields populated)

        Raises
        ------
        ConstraintViolation
            If the database rejects the row; the session is rolled back
        """
        self.session.add(obj)
        self._flush()
        self.session.refresh(obj)
        return obj

    def update(self, obj: T) -> T:
        """
        Update existing entity.

        Parameters
        ----------
        obj : T
            Entity instance with modifications

        Returns
        -------
        T
            Updated entity
        """
        self.session.add(obj)
        self._flush()
        self.session.refresh(obj)
        return obj

    def delete(self, obj: T) -> None:
        """
        Delete entity.

        Parameters
        ----------
        obj : T
            Entity instance to delete
        """
        self.session.delete(obj)
        self._flush()


class TeamRepository(BaseRepository):
    """
    Repository for Team operations.

    Examples
    --------
    >>> from querystudy_db.models import Team
    >>> repo = TeamRepository(session, Team)
    >>> team_a = repo.get_by_name("teamA")
    """

    def get_by_name(self, name: str) -> Team | None:
        """
        Get team by its unique name.

        Parameters
        ----------
        name : str
            Team name

        Returns
        -------
        Team | None
            Team or None if not found
        """
        stmt = select(self.model_class).where(self.model_class.name == name)
        return self.session.execute(stmt).scalars().first()

    def get_with_members(self, name: str) -> Team | None:
        """
        Get team with its members eagerly loaded.

        Prevents N+1 queries when iterating ``team.members``.
        """
        stmt = (
            select(self.model_class)
            .where(self.model_class.name == name)
            .options(selectinload(self.model_class.members))
        )
        return self.session.execute(stmt).scalars().first()

    def create_from_schema(self, schema: TeamCreate) -> Team:
        """
        Create team from Pydantic schema.

        Raises
        ------
        ConstraintViolation
            If a team with the same name exists
        """
        team = self.model_class(**schema.model_dump())
        return self.create(team)


class MemberRepository(BaseRepository):
    """
    Repository for Member operations.

    Search goes through :class:`~querystudy_db.query.MemberQuery` and
    returns detached projections.

    Examples
    --------
    >>> from querystudy_db.models import Member
    >>> repo = MemberRepository(session, Member)
    >>> repo.find_by_username("member1")
    [Member(id=1, username='member1', age=10)]
    """

    def save(self, member: Member) -> Member:
        """Persist ``member`` (insert or update) and return it."""
        return self.create(member)

    def find_all(self) -> list[Member]:
        """All members ordered by id."""
        return self.list()

    def find_by_username(self, username: str) -> list[Member]:
        """
        Members with this exact username.

        Parameters
        ----------
        username : str
            Username to match

        Returns
        -------
        list[Member]
            Matching members ordered by id (usernames are not unique)
        """
        return self.list(username=username)

    def search(self, criteria: MemberSearchCondition) -> list[MemberTeamDto]:
        """Dynamic search; see :meth:`MemberQuery.search`."""
        from querystudy_db.query import MemberQuery

        return MemberQuery(self.session).search(criteria)

    def create_from_schema(self, schema: MemberCreate) -> Member:
        """
        Create member from Pydantic schema.

        Parameters
        ----------
        schema : MemberCreate
            Validated input; ``team_name`` must name an existing team

        Returns
        -------
        Member
            Created member

        Raises
        ------
        NotFoundError
            If ``team_name`` is given and no such team exists
        """
        from querystudy_db.models.orm import Team

        team = None
        if schema.team_name is not None:
            team = TeamRepository(self.session, Team).get_by_name(schema.team_name)
            if team is None:
                msg = f"Team {schema.team_name!r} not found"
                raise NotFoundError(msg)

        member = self.model_class(username=schema.username, age=schema.age, team=team)
        member = self.create(member)
        logger.debug(f"Created {member!r}")
        return member
