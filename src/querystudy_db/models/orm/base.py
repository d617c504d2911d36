"""Base class for all ORM models."""

from __future__ import annotations

from inspect import cleandoc

from sqlalchemy import event
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""


@event.listens_for(Base.metadata, "before_create")
def _comment_tables_from_docstrings(target, connection, **kw):
    """Use the summary line of each model docstring as its table comment."""
    for mapper in Base.registry.mappers:
        table = mapper.local_table
        doc = mapper.class_.__doc__
        # An explicit comment in __table_args__ wins
        if doc and table.comment is None:
            table.comment = cleandoc(doc).splitlines()[0]
