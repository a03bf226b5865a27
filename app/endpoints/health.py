from fastapi import APIRouter
from datetime import datetime, timezone
from app.core.config import settings
from app.core.concurrency import concurrency_monitor
from app.services.session_store import session_store

router = APIRouter()

APP_VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


@router.get("/healthz")
async def healthz():
    return {"status": "ok"}


@router.get("/readyz")
async def readyz():
    missing = []
    if not settings.OPENAI_API_KEY:
        missing.append("OPENAI_API_KEY")
    if missing:
        return {"status": "degraded", "missing": missing}
    return {"status": "ready"}


@router.get("/version")
async def version():
    return {"version": APP_VERSION, "env": {"debug": settings.DEBUG}}


@router.get("/metrics")
async def metrics():
    """Get current concurrency stats and session count."""
    return {
        "concurrency": concurrency_monitor.get_stats(),
        "sessions": len(session_store),
        "config": {
            "max_llm_calls": settings.MAX_CONCURRENT_LLM_CALLS,
            "max_speech_calls": settings.MAX_CONCURRENT_SPEECH_CALLS,
            "max_video_calls": settings.MAX_CONCURRENT_VIDEO_CALLS,
            "rate_limit_per_minute": settings.RATE_LIMIT_PER_MINUTE,
            "request_timeout": settings.REQUEST_TIMEOUT_SECONDS
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
