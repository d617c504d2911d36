"""Tests for order specifications and page requests."""

from __future__ import annotations

import pytest

from querystudy_db.constants import NullsOrder, SortDirection, SortKey
from querystudy_db.errors import ConfigurationError
from querystudy_db.query import DEFAULT_ORDER, OrderSpec, Page, PageRequest, normalize_order


class TestOrderSpec:
    """Test OrderSpec construction and parsing."""

    def test_defaults(self):
        spec = OrderSpec(SortKey.AGE)
        assert spec.direction is SortDirection.ASC
        assert spec.nulls is NullsOrder.LAST

    def test_strings_coerced(self):
        """Test plain strings are converted to enums."""
        assert OrderSpec("username", "desc", "first") == OrderSpec(
            SortKey.USERNAME, SortDirection.DESC, NullsOrder.FIRST
        )

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("age", OrderSpec(SortKey.AGE)),
            ("age:desc", OrderSpec(SortKey.AGE, SortDirection.DESC)),
            ("USERNAME:Asc:first", OrderSpec(SortKey.USERNAME, nulls=NullsOrder.FIRST)),
            ("team_name:desc", OrderSpec(SortKey.TEAM_NAME, SortDirection.DESC)),
        ],
    )
    def test_parse(self, text, expected):
        assert OrderSpec.parse(text) == expected

    @pytest.mark.parametrize("text", ["", "height", "age:up", "age:asc:middle", "a:b:c:d"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            OrderSpec.parse(text)

    def test_unknown_key_message(self):
        """Test the error names the accepted values."""
        with pytest.raises(ValueError, match="member_id"):
            OrderSpec("height")


class TestNormalizeOrder:
    """Test normalize_order."""

    def test_none_is_default(self):
        assert normalize_order(None) == DEFAULT_ORDER
        assert DEFAULT_ORDER == (OrderSpec(SortKey.MEMBER_ID),)

    def test_single_spec(self):
        spec = OrderSpec("age")
        assert normalize_order(spec) == (spec,)

    def test_empty_stays_empty(self):
        assert normalize_order([]) == ()


class TestPageRequest:
    """Test PageRequest validation."""

    def test_default_order(self):
        assert PageRequest(offset=0, limit=10).order == DEFAULT_ORDER

    def test_order_list_becomes_tuple(self):
        request = PageRequest(0, 10, [OrderSpec("age")])
        assert request.order == (OrderSpec("age"),)

    def test_negative_offset(self):
        with pytest.raises(ValueError, match="offset"):
            PageRequest(offset=-1, limit=10)

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit(self, limit):
        with pytest.raises(ValueError, match="limit"):
            PageRequest(offset=0, limit=limit)

    def test_empty_order(self):
        """Test pagination without ordering is refused."""
        with pytest.raises(ConfigurationError):
            PageRequest(offset=0, limit=10, order=())


class TestPage:
    """Test Page.has_next."""

    @pytest.mark.parametrize(
        ("offset", "size", "total", "expected"),
        [(0, 2, 4, True), (2, 2, 4, False), (3, 0, 2, False)],
    )
    def test_has_next(self, offset, size, total, expected):
        page = Page(content=list(range(size)), total=total, offset=offset, limit=2)
        assert page.has_next is expected
