from fastapi import APIRouter

from app.endpoints import health
from app.api import pages, story, companion, hero, notes, quiz


router = APIRouter()

# Built-in endpoints
router.include_router(health.router, tags=["health"])

# The page itself
router.include_router(pages.router, tags=["pages"])

# Widget endpoints
router.include_router(story.router, tags=["story"])
router.include_router(companion.router, tags=["companion"])
router.include_router(hero.router, tags=["hero"])
router.include_router(notes.router, tags=["notes"])
router.include_router(quiz.router, tags=["quiz"])
