from fastapi import APIRouter, HTTPException, status

from app.core.logger_config import setup_logger
from app.data.stories import get_current_story, get_story, quick_prompts
from app.exceptions import StoryNotFoundError


router = APIRouter(prefix="/api")
logger = setup_logger(__name__)


def _story_payload(story):
    data = story.model_dump(exclude={"quiz"})
    data["title"] = story.title
    data["paragraphs"] = story.paragraphs
    data["quick_prompts"] = [p.model_dump() for p in quick_prompts(story)]
    data["question_count"] = len(story.quiz)
    return data


@router.get("/story")
async def get_presented_story():
    """The story the site is dedicated to."""
    return _story_payload(get_current_story())


@router.get("/story/{story_id}")
async def get_story_by_id(story_id: str):
    try:
        return _story_payload(get_story(story_id))
    except StoryNotFoundError as e:
        logger.warning(f"Story lookup failed: {story_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
