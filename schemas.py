"""
Database Schemas

Pydantic models that define MongoDB collections for the weekly office poll.
Each class name maps to a collection with the lowercase name.

Guiding principles:
- One vote per name per week, enforced by the store's upsert, not by an index
- Timestamps are stored as epoch milliseconds
"""

from typing import Literal, Tuple, get_args

from pydantic import BaseModel, Field

VoteOption = Literal["hell-yeah", "miss-me", "only-if-boys"]
VOTE_OPTIONS: Tuple[str, ...] = get_args(VoteOption)


class Vote(BaseModel):
    """
    A single weekly vote
    Collection: "vote"
    """
    name: str = Field(..., description="Name the voter entered")
    option: VoteOption = Field(..., description="Chosen answer")
    weekStart: int = Field(..., description="Monday 00:00 local of the vote's week, epoch ms")
    timestamp: int = Field(..., description="When the vote was last submitted, epoch ms")
