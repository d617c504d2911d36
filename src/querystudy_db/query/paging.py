"""Ordering and pagination specifications."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from querystudy_db.constants import NullsOrder, SortDirection, SortKey
from querystudy_db.errors import ConfigurationError

__all__ = [
    "DEFAULT_ORDER",
    "OrderSpec",
    "Page",
    "PageRequest",
    "normalize_order",
]

T = TypeVar("T")


@dataclass(frozen=True)
class OrderSpec:
    """
    One explicit sort key.

    NULLs sort last unless ``nulls`` says otherwise, independent of how
    the backend orders NULL by default.

    Examples
    --------
    >>> OrderSpec.parse("username:desc")
    OrderSpec(key=<SortKey.USERNAME: 'username'>, direction=<SortDirection.DESC: 'desc'>, nulls=<NullsOrder.LAST: 'last'>)
    """

    key: SortKey
    direction: SortDirection = SortDirection.ASC
    nulls: NullsOrder = NullsOrder.LAST

    def __post_init__(self) -> None:
        # Accept plain strings ("age", "desc") as well as the enums
        object.__setattr__(self, "key", _coerce(SortKey, self.key, "sort key"))
        object.__setattr__(
            self, "direction", _coerce(SortDirection, self.direction, "sort direction")
        )
        object.__setattr__(self, "nulls", _coerce(NullsOrder, self.nulls, "nulls order"))

    @classmethod
    def parse(cls, text: str) -> OrderSpec:
        """
        Parse ``KEY[:DIRECTION[:NULLS]]``, e.g. ``age:desc`` or ``username:asc:first``.

        Raises
        ------
        ValueError
            If any part is unknown
        """
        parts = [part.strip().lower() for part in text.split(":")]
        if not parts[0] or len(parts) > 3:
            msg = f"Invalid order spec: {text!r}"
            raise ValueError(msg)
        return cls(*parts)


def _coerce(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        msg = f"Unknown {what} {value!r} (expected one of: {choices})"
        raise ValueError(msg) from None


DEFAULT_ORDER: tuple[OrderSpec, ...] = (OrderSpec(SortKey.MEMBER_ID),)


def normalize_order(
    order: OrderSpec | Sequence[OrderSpec] | None,
) -> tuple[OrderSpec, ...]:
    """
    Normalize an ordering argument to a tuple.

    ``None`` selects :data:`DEFAULT_ORDER` (member id ascending). An
    explicitly empty sequence stays empty so that callers who require an
    ordering can reject it.
    """
    if order is None:
        return DEFAULT_ORDER
    if isinstance(order, OrderSpec):
        return (order,)
    return tuple(order)


@dataclass(frozen=True)
class PageRequest:
    """
    Offset/limit window over an ordered result.

    Parameters
    ----------
    offset : int
        Zero-based index of the first row
    limit : int
        Maximum number of rows
    order : tuple[OrderSpec, ...]
        Sort keys; must not be empty

    Raises
    ------
    ValueError
        If ``offset`` is negative or ``limit`` is not positive
    ConfigurationError
        If ``order`` is empty (unordered pages are not deterministic)
    """

    offset: int
    limit: int
    order: tuple[OrderSpec, ...] = DEFAULT_ORDER

    def __post_init__(self) -> None:
        if self.offset < 0:
            msg = f"offset must be >= 0, got {self.offset}"
            raise ValueError(msg)
        if self.limit <= 0:
            msg = f"limit must be > 0, got {self.limit}"
            raise ValueError(msg)
        order = normalize_order(self.order)
        if not order:
            msg = "Paginated queries require an explicit ordering"
            raise ConfigurationError(msg)
        object.__setattr__(self, "order", order)


@dataclass
class Page(Generic[T]):
    """One page of results plus the total match count."""

    content: list[T]
    total: int
    offset: int
    limit: int
    order: tuple[OrderSpec, ...] = field(default=DEFAULT_ORDER, repr=False)

    @property
    def has_next(self) -> bool:
        """True if rows exist past this page."""
        return self.offset + len(self.content) < self.total
