from typing import Optional

from fastapi import Request, Response

from app.core.config import settings
from app.core.logger_config import setup_logger
from app.data.stories import get_current_story
from app.services.session_store import VisitorSession, session_store

logger = setup_logger(__name__)

SESSION_HEADER = "X-Session-ID"
_MAX_SESSION_ID_LENGTH = 64


def _requested_session_id(request: Request) -> Optional[str]:
    session_id = request.headers.get(SESSION_HEADER) or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        return None
    session_id = session_id.strip()
    # Ignore malformed ids rather than failing the page
    if not session_id.isalnum() or len(session_id) > _MAX_SESSION_ID_LENGTH:
        logger.warning("Ignoring malformed session id")
        return None
    return session_id


def resolve_session(request: Request) -> VisitorSession:
    return session_store.get_or_create(_requested_session_id(request), get_current_story())


def attach_session(response: Response, session: VisitorSession) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.session_id,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    response.headers[SESSION_HEADER] = session.session_id


async def get_visitor_session(request: Request, response: Response) -> VisitorSession:
    """Resolve the visitor's session from header or cookie, creating one when absent."""
    session = resolve_session(request)
    attach_session(response, session)
    return session
