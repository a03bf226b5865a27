from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.core.config import settings
from app.core.logger_config import setup_logger
from app.data.stories import quick_prompts
from app.dependencies.session import attach_session, resolve_session
from app.services import quiz_service
from app.services.notification_service import notify_visit


router = APIRouter()
logger = setup_logger(__name__)
templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Render the story page for the visitor's session."""
    session = resolve_session(request)
    story = session.story

    notify_visit({
        "path": request.url.path,
        "user_agent": request.headers.get("user-agent", ""),
        "referrer": request.headers.get("referer", ""),
    })

    response = templates.TemplateResponse(
        request,
        "index.html",
        {
            "story": story,
            "quick_prompts": quick_prompts(story),
            "messages": session.messages,
            "notes": session.notes,
            "quiz": quiz_service.get_quiz(story),
            "video_url": session.video_url,
            "year": datetime.now().year,
        },
    )
    attach_session(response, session)
    return response
