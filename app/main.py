from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uuid as _uuid
from collections import defaultdict
import os
import time
import asyncio

from app.core.config import settings
from app.api.router import router as api_router
from app.core.logger_config import setup_logger

logger = setup_logger(__name__)

RATE_LIMIT_EXEMPT_PREFIXES = ("/healthz", "/readyz", "/health", "/static", "/media")


def create_app() -> FastAPI:
    app = FastAPI(title="Josphat Bible Analysis", version="1.0.0")

    # Fail fast on missing critical env in production
    try:
        settings.validate_required_settings()
    except ValueError:
        if not settings.DEBUG:
            raise
        logger.warning("Running without required provider settings (DEBUG)")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.cors_allow_all else settings.ALLOWED_ORIGINS,
        allow_credentials=not settings.cors_allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    rate_limit_store = defaultdict(list)

    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        """Simple rate limiting middleware."""
        if request.url.path.startswith(RATE_LIMIT_EXEMPT_PREFIXES):
            return await call_next(request)

        client_ip = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if not client_ip and request.client:
            client_ip = request.client.host
        client_id = client_ip or "unknown"

        now = time.time()
        minute_ago = now - 60
        rate_limit_store[client_id] = [t for t in rate_limit_store[client_id] if t > minute_ago]

        if len(rate_limit_store[client_id]) >= settings.RATE_LIMIT_PER_MINUTE:
            logger.warning(f"Rate limit exceeded for {client_id}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": f"Rate limit exceeded. Max {settings.RATE_LIMIT_PER_MINUTE} requests per minute."},
            )

        rate_limit_store[client_id].append(now)

        try:
            return await asyncio.wait_for(
                call_next(request),
                timeout=settings.REQUEST_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.error(f"Request timeout for {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"detail": f"Request timeout after {settings.REQUEST_TIMEOUT_SECONDS} seconds"},
            )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or str(_uuid.uuid4())
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=(), payment=()")
        response.headers.setdefault("X-Request-ID", req_id)
        if not settings.DEBUG:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        # The hero background and fonts are loaded from external hosts
        csp = (
            "default-src 'self'; "
            "img-src 'self' data: blob: https:; "
            "media-src 'self' data: blob:; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
            "connect-src 'self'; "
            "font-src 'self' data: https://fonts.gstatic.com; "
            "frame-ancestors 'none'"
        )
        response.headers.setdefault("Content-Security-Policy", csp)
        return response

    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")
    os.makedirs(settings.MEDIA_DIR, exist_ok=True)
    app.mount("/media", StaticFiles(directory=settings.MEDIA_DIR), name="media")

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
