"""
Chat-related data models.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One entry of the companion conversation; identity is its list position."""

    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    text: str = Field(..., max_length=2000, description="Question for the study companion")


class ChatResponse(BaseModel):
    """Conversation after a send; ``reply`` is None when the message was ignored."""

    reply: Optional[ChatMessage] = None
    messages: List[ChatMessage]
