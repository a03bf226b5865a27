"""
Notes widget: passages the visitor saves while studying.
"""

from typing import List

from app.core.logger_config import setup_logger
from app.exceptions import ChatbotError, NoteNotFoundError
from app.models.note_models import Note
from app.services.session_store import VisitorSession

logger = setup_logger(__name__)

AI_INSIGHT_SOURCE = "AI Insight"


def add_note(session: VisitorSession, text: str, source: str = "Personal") -> Note:
    """Save a note at the top of the list. Blank text is rejected with ValueError."""
    if not text or not text.strip():
        raise ValueError("Note text must not be empty")
    note = Note(text=text.strip(), source=source)
    session.notes.insert(0, note)
    logger.info(f"Session {session.session_id} saved note {note.id} from {source}")
    return note


def save_message_as_note(session: VisitorSession, index: int) -> Note:
    """Save a companion reply to the notes as an AI insight."""
    if index < 0 or index >= len(session.messages):
        raise ChatbotError(f"No message at position {index}", error_code="MESSAGE_NOT_FOUND")
    message = session.messages[index]
    if message.role != "model":
        raise ChatbotError("Only companion replies can be saved as insights", error_code="NOT_A_REPLY")
    return add_note(session, message.text, AI_INSIGHT_SOURCE)


def list_notes(session: VisitorSession) -> List[Note]:
    return list(session.notes)


def remove_note(session: VisitorSession, note_id: str) -> Note:
    for position, note in enumerate(session.notes):
        if note.id == note_id:
            del session.notes[position]
            logger.info(f"Session {session.session_id} removed note {note_id}")
            return note
    raise NoteNotFoundError(f"Note '{note_id}' not found", error_code="NOTE_NOT_FOUND")


def clear_notes(session: VisitorSession) -> int:
    count = len(session.notes)
    session.notes.clear()
    return count
