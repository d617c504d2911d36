"""Exception types raised by querystudy_db.

An empty query result is never an error; these cover misuse and
store-level failures only.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "ConstraintViolation",
    "NotFoundError",
    "QueryStudyError",
]


class QueryStudyError(Exception):
    """Base class for querystudy_db errors."""


class ConfigurationError(QueryStudyError):
    """Raised when a query runs without a usable unit of work.

    Also raised for pagination requests that carry no ordering.
    """


class NotFoundError(QueryStudyError):
    """Raised when exactly one row was expected and none matched."""


class ConstraintViolation(QueryStudyError):
    """Raised when the store rejects a write (unique, not-null, foreign key)."""
