"""Utility functions for querystudy_db."""

from __future__ import annotations

__all__ = [
    # Mapped types
    "Age",
    "Name",
    "OptionalName",
    "Pk",
    "fk",
]

from .mapped_types import Age, Name, OptionalName, Pk, fk
