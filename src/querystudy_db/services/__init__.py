"""Service layer for querystudy_db."""

from __future__ import annotations

__all__ = ["SeedResult", "seed_members"]

from .seed import SeedResult, seed_members
