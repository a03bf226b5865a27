"""
Note-related data models.
"""

import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field


class Note(BaseModel):
    """A passage the visitor saved to their notes."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    text: str
    source: str = "Personal"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NoteInput(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)
    source: str = Field(default="Personal", max_length=100)
