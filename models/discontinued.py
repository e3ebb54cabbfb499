"""
Retention policy schemas for the discontinued archive.
"""

from pydantic import BaseModel, Field
from enum import Enum

from models.base import BaseSchema


class RetentionMode(str, Enum):
    """How the archive is pruned."""
    KEEP_ALL = "keep_all"
    MAX_AGE = "max_age"
    UNREFERENCED = "unreferenced"


class RetentionPolicy(BaseSchema):
    """
    Archive pruning policy.

    KEEP_ALL never prunes. UNREFERENCED drops every entry no live
    commitment points at. MAX_AGE drops unreferenced entries older than
    max_age_days. Live-referenced entries are never pruned.
    """

    mode: RetentionMode = RetentionMode.KEEP_ALL
    max_age_days: int = Field(default=180, ge=1)


class PruneResult(BaseModel):
    """Outcome of a prune pass."""

    pruned: int
    remaining: int
    pruned_ids: list[str] = Field(default_factory=list)
