"""Dynamic member queries: condition builders, ordering/paging, execution."""

from __future__ import annotations

__all__ = [
    # Condition builders
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
    # Ordering / paging
    "DEFAULT_ORDER",
    "OrderSpec",
    "Page",
    "PageRequest",
    "normalize_order",
    # Execution
    "BulkResult",
    "MemberQuery",
]

from .conditions import (
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
from .executor import BulkResult, MemberQuery
from .paging import DEFAULT_ORDER, OrderSpec, Page, PageRequest, normalize_order
