"""Tests for repository pattern implementation."""

from __future__ import annotations

import pytest

from querystudy_db.db.repository import BaseRepository, MemberRepository, TeamRepository
from querystudy_db.errors import ConstraintViolation, NotFoundError
from querystudy_db.models import Member, MemberCreate, MemberSearchCondition, Team, TeamCreate


@pytest.fixture
def member_repo(session):
    return MemberRepository(session, Member)


@pytest.fixture
def team_repo(session):
    return TeamRepository(session, Team)


class TestBaseRepository:
    """Test BaseRepository CRUD operations."""

    def test_create_and_get(self, session):
        """Test creating and retrieving entity."""
        repo = BaseRepository(session, Team)

        team = repo.create(Team(name="teamC"))

        assert team.id is not None
        assert repo.get(team.id) is team

    def test_get_missing(self, session):
        """Test getting a missing primary key returns None."""
        assert BaseRepository(session, Team).get(999) is None

    def test_get_or_raise(self, session):
        """Test missing primary key raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Team 999 not found"):
            BaseRepository(session, Team).get_or_raise(999)

    def test_list_with_filters(self, session, members):
        """Test listing with equality filters."""
        repo = BaseRepository(session, Member)

        assert [m.username for m in repo.list(team_id=members[2].team_id)] == [
            "member3",
            "member4",
        ]
        assert len(repo.list()) == 4

    def test_update(self, session, members):
        """Test updating entity."""
        repo = BaseRepository(session, Member)
        member = members[0]
        member.age = 11

        repo.update(member)

        assert repo.get(member.id).age == 11

    def test_delete(self, session, members):
        """Test deleting entity."""
        repo = BaseRepository(session, Member)
        member_id = members[0].id

        repo.delete(members[0])

        assert repo.get(member_id) is None

    def test_constraint_violation_rolls_back(self, session, teams):
        """Test integrity errors surface as ConstraintViolation."""
        repo = BaseRepository(session, Team)

        with pytest.raises(ConstraintViolation):
            repo.create(Team(name="teamA"))

        assert [t.name for t in repo.list()] == ["teamA", "teamB"]


class TestMemberRepository:
    """Test MemberRepository."""

    def test_save_and_find(self, member_repo):
        """Test a saved member can be found by id and by username."""
        member = member_repo.save(Member(username="member1", age=10))

        assert member_repo.get(member.id) is member
        assert member_repo.find_by_username("member1") == [member]
        assert member_repo.find_all() == [member]

    def test_find_by_username_not_unique(self, member_repo):
        """Test duplicate usernames are all returned."""
        first = member_repo.save(Member(username="member1", age=10))
        second = member_repo.save(Member(username="member1", age=11))

        assert member_repo.find_by_username("member1") == [first, second]

    def test_search(self, member_repo, members):
        """Test search delegates to the dynamic condition builder."""
        rows = member_repo.search(
            MemberSearchCondition(age_goe=35, age_loe=40, team_name="teamB")
        )

        assert [row.username for row in rows] == ["member4"]

    def test_create_from_schema(self, member_repo, teams):
        """Test creating a member from validated input."""
        member = member_repo.create_from_schema(
            MemberCreate(username="member9", age=9, team_name="teamB")
        )

        assert member.id is not None
        assert member.team.name == "teamB"

    def test_create_from_schema_without_team(self, member_repo):
        member = member_repo.create_from_schema(MemberCreate(username="solo"))
        assert member.team is None
        assert member.age == 0

    def test_create_from_schema_unknown_team(self, member_repo, teams):
        """Test a missing team raises NotFoundError."""
        with pytest.raises(NotFoundError, match="teamZ"):
            member_repo.create_from_schema(MemberCreate(username="x", team_name="teamZ"))


class TestTeamRepository:
    """Test TeamRepository."""

    def test_get_by_name(self, team_repo, teams):
        assert team_repo.get_by_name("teamB") is teams[1]
        assert team_repo.get_by_name("teamZ") is None

    def test_get_with_members(self, session, team_repo, members):
        """Test members are loaded eagerly."""
        session.expunge_all()
        team = team_repo.get_with_members("teamA")

        assert "members" in team.__dict__
        assert sorted(m.username for m in team.members) == ["member1", "member2"]

    def test_create_from_schema(self, team_repo):
        team = team_repo.create_from_schema(TeamCreate(name="teamC"))
        assert team.id is not None

    def test_duplicate_name(self, team_repo, teams):
        """Test duplicate team names are rejected."""
        with pytest.raises(ConstraintViolation):
            team_repo.create_from_schema(TeamCreate(name="teamA"))
