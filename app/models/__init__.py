"""
Data models for the Moses story companion.
"""

from .story_models import StoryData, QuizQuestion, QuickPrompt
from .chat_models import ChatMessage, ChatRequest, ChatResponse
from .note_models import Note, NoteInput

__all__ = [
    "StoryData",
    "QuizQuestion",
    "QuickPrompt",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Note",
    "NoteInput",
]
