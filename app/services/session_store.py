"""
In-memory visitor sessions.

A session holds what the page keeps in component state: the companion
conversation, the saved notes, the hero video and the busy flags of each
widget. Sessions are evicted after SESSION_TTL_SECONDS without a request
and never outlive the process.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.core.config import settings
from app.core.logger_config import setup_logger
from app.models.chat_models import ChatMessage
from app.models.note_models import Note
from app.models.story_models import StoryData

logger = setup_logger(__name__)


def greeting_for(story: StoryData) -> ChatMessage:
    return ChatMessage(
        role="model",
        text=(
            f"I am here to help you reflect on this sacred moment in {story.chapter_ref}. "
            f"What would you like to explore about {story.title_prefix} {story.title_highlight}?"
        ),
    )


@dataclass
class VisitorSession:
    session_id: str
    story: StoryData
    messages: List[ChatMessage] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    busy: set = field(default_factory=set)
    video_url: Optional[str] = None
    loading_step: str = ""
    speaking_index: Optional[int] = None
    last_seen: float = field(default_factory=time.time)

    def __post_init__(self):
        if not self.messages:
            self.messages.append(greeting_for(self.story))

    def reset_conversation(self) -> None:
        self.messages = [greeting_for(self.story)]


class SessionStore:
    """Keeps one VisitorSession per session id, evicting idle ones."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self._sessions: Dict[str, VisitorSession] = {}
        self.ttl_seconds = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        logger.info("Session store initialized")

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def prune(self, now: Optional[float] = None) -> int:
        """Drop sessions idle longer than the TTL; sessions with a request in flight are kept."""
        now = time.time() if now is None else now
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now - session.last_seen > self.ttl_seconds and not session.busy
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} idle visitor session(s)")
        return len(expired)

    def get_or_create(self, session_id: Optional[str], story: StoryData) -> VisitorSession:
        now = time.time()
        if not session_id:
            session_id = self.new_session_id()
        session = self._sessions.get(session_id)
        if session is not None and now - session.last_seen > self.ttl_seconds and not session.busy:
            session = None
        if session is None:
            self.prune(now)
            session = VisitorSession(session_id=session_id, story=story)
            self._sessions[session_id] = session
            logger.info(f"Created new visitor session {session_id}")
        session.last_seen = now
        return session

    def get(self, session_id: str) -> Optional[VisitorSession]:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info(f"Discarded visitor session {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)


# Global session store
session_store = SessionStore()
