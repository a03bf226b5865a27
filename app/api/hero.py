from fastapi import APIRouter, Depends, HTTPException, status

from app.core.logger_config import setup_logger
from app.dependencies.session import get_visitor_session
from app.exceptions import WidgetBusyError
from app.services.hero import hero_service, hero_status
from app.services.session_store import VisitorSession


router = APIRouter(prefix="/api")
logger = setup_logger(__name__)


@router.post("/visualize")
async def visualize_scene(session: VisitorSession = Depends(get_visitor_session)):
    """
    Generate the hero scene video and narrate the passage.

    Blocks until both steps finish. ``success`` is false when no new scene was
    generated, in which case ``video_url`` is the previous video (or null);
    failures are logged, not reported.
    """
    logger.info(f"[HERO] visualize requested by session {session.session_id}")
    try:
        result = await hero_service.visualize(session)
    except WidgetBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return {"success": result["generated"], **result}


@router.get("/visualize")
async def visualize_status(session: VisitorSession = Depends(get_visitor_session)):
    """Progress of the session's visualization, for polling while it runs."""
    return hero_status(session)
