"""
Pydantic models for the entities the scheduler reads but does not own.

Cards and learners live in the host application. The core only keeps their
ids on items and resolves them back through the repository when a deck
query needs card attributes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Card(BaseModel):
    """A unit of study content (front/back text)."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable card identifier")
    front: str = Field(..., description="Prompt side")
    back: str = Field(default="", description="Answer side")
    tags: tuple[str, ...] = Field(default_factory=tuple, description="Free-form labels for narrowing queries")


class Learner(BaseModel):
    """Someone studying cards. Owns one deck."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
