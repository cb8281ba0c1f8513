"""
Collaboration schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.schemas.common import CamelModel


class CommentCreate(CamelModel):
    """Comment creation request."""

    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(CamelModel):
    """Comment response."""

    id: uuid.UUID
    project_id: uuid.UUID
    author_id: uuid.UUID
    author_name: Optional[str] = None
    content: str
    created_at: datetime


class ReactionResponse(CamelModel):
    """State after a reaction toggle."""

    project_id: uuid.UUID
    user_id: uuid.UUID
    reacted: bool
    total_reactions: int
