"""Tests for predicate fragment builders."""

from __future__ import annotations

from itertools import combinations

import pytest
from sqlalchemy import select

from querystudy_db.models import Member, MemberSearchCondition
from querystudy_db.query import (
    MemberQuery,
    age_between,
    age_eq,
    age_goe,
    age_loe,
    all_conditions,
    combine,
    conditions_for,
    team_name_eq,
    username_eq,
    where,
)


def sql(clause) -> str:
    """Render a clause with literal values inlined."""
    return str(clause.compile(compile_kwargs={"literal_binds": True}))


class TestFieldBuilders:
    """Each builder maps one field to one fragment or to None."""

    @pytest.mark.parametrize(
        "builder", [username_eq, team_name_eq, age_goe, age_loe, age_eq]
    )
    def test_absent_gives_none(self, builder):
        """Test that an absent value produces no fragment."""
        assert builder(None) is None

    def test_username_eq(self):
        assert sql(username_eq("member1")) == "member.username = 'member1'"

    def test_team_name_eq(self):
        assert sql(team_name_eq("teamA")) == "team.name = 'teamA'"

    def test_age_bounds(self):
        assert sql(age_goe(10)) == "member.age >= 10"
        assert sql(age_loe(40)) == "member.age <= 40"
        assert sql(age_eq(0)) == "member.age = 0"

    def test_age_between(self):
        """Test either bound of a range may be absent."""
        assert sql(age_between(10, 20)) == "member.age >= 10 AND member.age <= 20"
        assert sql(age_between(None, 20)) == "member.age <= 20"
        assert age_between(None, None) is None


class TestCombine:
    """Test AND-folding of optional fragments."""

    def test_nothing_present(self):
        """Test that no fragment means no constraint."""
        assert combine() is None
        assert combine(None, None, None) is None

    def test_none_is_identity(self):
        """Test that None entries do not change the result."""
        assert sql(combine(None, age_goe(10), None)) == sql(age_goe(10))

    def test_all_fragments_anded(self):
        combined = combine(username_eq("member1"), age_goe(10), age_loe(20))
        assert sql(combined) == (
            "member.username = 'member1' AND member.age >= 10 AND member.age <= 20"
        )

    def test_conditions_for_skips_absent(self):
        cond = MemberSearchCondition(team_name="teamB", age_loe=40)
        assert [sql(f) for f in conditions_for(cond)] == [
            "team.name = 'teamB'",
            "member.age <= 40",
        ]

    def test_all_conditions_empty(self):
        assert conditions_for(MemberSearchCondition()) == []
        assert all_conditions(MemberSearchCondition()) is None

    def test_where_without_fragments_keeps_statement(self):
        """Test that applying nothing returns the same statement."""
        stmt = select(Member)
        assert where(stmt) is stmt
        assert where(stmt, None) is stmt

    def test_where_applies_to_entity_query(self):
        stmt = where(select(Member.id), age_goe(30))
        assert "WHERE member.age >= 30" in sql(stmt)


# Single-field criteria and the member usernames each one selects
SINGLE_FIELD_CASES = {
    "username": ({"username": "member1"}, {"member1"}),
    "team_name": ({"team_name": "teamB"}, {"member3", "member4"}),
    "age_goe": ({"age_goe": 20}, {"member2", "member3", "member4"}),
    "age_loe": ({"age_loe": 30}, {"member1", "member2", "member3"}),
}


def usernames(session, **fields) -> set[str]:
    rows = MemberQuery(session).search(MemberSearchCondition(**fields))
    return {row.username for row in rows}


class TestConditionSemantics:
    """Properties of fragments executed against the four-member fixture."""

    def test_all_absent_returns_everything(self, session, members):
        assert usernames(session) == {"member1", "member2", "member3", "member4"}

    @pytest.mark.parametrize("field", sorted(SINGLE_FIELD_CASES))
    def test_single_field_subset(self, session, members, field):
        """Test one present field returns exactly the rows satisfying it."""
        fields, expected = SINGLE_FIELD_CASES[field]
        assert usernames(session, **fields) == expected

    @pytest.mark.parametrize(
        ("first", "second"), list(combinations(sorted(SINGLE_FIELD_CASES), 2))
    )
    def test_pair_is_intersection(self, session, members, first, second):
        """Test two present fields give the intersection of their single-field results."""
        first_fields, _ = SINGLE_FIELD_CASES[first]
        second_fields, _ = SINGLE_FIELD_CASES[second]

        combined = usernames(session, **first_fields, **second_fields)

        assert combined == usernames(session, **first_fields) & usernames(
            session, **second_fields
        )

    def test_range_and_team(self, session, members):
        """Test age range combined with team name."""
        assert usernames(session, age_goe=35, age_loe=40, team_name="teamB") == {
            "member4"
        }

    def test_no_match_is_empty_not_error(self, session, members):
        assert usernames(session, username="nobody") == set()
