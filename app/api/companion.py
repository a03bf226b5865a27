import base64
import traceback
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from app.core.concurrency import SPEECH_WIDGET, widget_guard
from app.core.logger_config import setup_logger
from app.dependencies.session import get_visitor_session
from app.exceptions import ChatbotError, WidgetBusyError
from app.models.chat_models import ChatRequest, ChatResponse
from app.services.companion import companion_service
from app.services.notes_service import save_message_as_note
from app.services.session_store import VisitorSession
from app.services.speech_service import speech_service


router = APIRouter(prefix="/api")
logger = setup_logger(__name__)


class SpeechRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=20000, description="Text to narrate")


def _audio_payload(audio: Optional[bytes]) -> dict:
    return {
        "audio": base64.b64encode(audio).decode("ascii") if audio else None,
        "mime_type": "audio/mpeg" if audio else None,
    }


def _message_error(e: ChatbotError) -> HTTPException:
    code = status.HTTP_404_NOT_FOUND if e.error_code == "MESSAGE_NOT_FOUND" else status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=e.message)


@router.get("/chat", response_model=ChatResponse)
async def get_chat(session: VisitorSession = Depends(get_visitor_session)):
    """Current conversation, starting with the companion's greeting."""
    return ChatResponse(messages=session.messages)


@router.post("/chat", response_model=ChatResponse)
async def send_chat_message(
    request: ChatRequest,
    session: VisitorSession = Depends(get_visitor_session),
):
    """Ask the study companion a question. Blank questions are ignored."""
    try:
        reply = await companion_service.send_message(session, request.text)
        return ChatResponse(reply=reply, messages=session.messages)
    except WidgetBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except Exception as e:
        logger.error(f"Chat failed: {e}")
        logger.error(traceback.format_exc())
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Chat failed: {str(e)}",
        )


@router.delete("/chat", response_model=ChatResponse)
async def reset_chat(session: VisitorSession = Depends(get_visitor_session)):
    session.reset_conversation()
    return ChatResponse(messages=session.messages)


@router.post("/chat/{index}/speech")
async def speak_chat_message(index: int, session: VisitorSession = Depends(get_visitor_session)):
    """Read a companion reply aloud. ``audio`` is null when synthesis failed."""
    try:
        audio = await speech_service.speak_message(session, index)
        return {"index": index, **_audio_payload(audio)}
    except WidgetBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except ChatbotError as e:
        raise _message_error(e)


@router.post("/chat/{index}/note", status_code=status.HTTP_201_CREATED)
async def save_chat_message_note(index: int, session: VisitorSession = Depends(get_visitor_session)):
    try:
        note = save_message_as_note(session, index)
        return {"success": True, "note": note}
    except ChatbotError as e:
        raise _message_error(e)


@router.post("/speech")
async def synthesize_speech(
    request: SpeechRequest,
    session: VisitorSession = Depends(get_visitor_session),
):
    """Narrate arbitrary passage text (scripture view)."""
    try:
        async with widget_guard(session.busy, SPEECH_WIDGET):
            audio = await speech_service.generate_speech(request.text)
        return _audio_payload(audio)
    except WidgetBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
