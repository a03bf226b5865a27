from fastapi import APIRouter, Depends, HTTPException, status

from app.core.logger_config import setup_logger
from app.dependencies.session import get_visitor_session
from app.exceptions import NoteNotFoundError
from app.models.note_models import NoteInput
from app.services import notes_service
from app.services.session_store import VisitorSession


router = APIRouter(prefix="/api")
logger = setup_logger(__name__)


@router.get("/notes")
async def list_notes(session: VisitorSession = Depends(get_visitor_session)):
    notes = notes_service.list_notes(session)
    return {"notes": notes, "count": len(notes)}


@router.post("/notes", status_code=status.HTTP_201_CREATED)
async def add_note(note_input: NoteInput, session: VisitorSession = Depends(get_visitor_session)):
    try:
        note = notes_service.add_note(session, note_input.text, note_input.source)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True, "note": note}


@router.delete("/notes/{note_id}")
async def remove_note(note_id: str, session: VisitorSession = Depends(get_visitor_session)):
    try:
        note = notes_service.remove_note(session, note_id)
    except NoteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "note": note}


@router.delete("/notes")
async def clear_notes(session: VisitorSession = Depends(get_visitor_session)):
    removed = notes_service.clear_notes(session)
    logger.info(f"Session {session.session_id} cleared {removed} notes")
    return {"success": True, "removed": removed}
