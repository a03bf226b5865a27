from typing import List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from app.core.logger_config import setup_logger
from app.data.stories import get_current_story
from app.exceptions import QuizError
from app.services import quiz_service


router = APIRouter(prefix="/api")
logger = setup_logger(__name__)


class QuizSubmission(BaseModel):
    answers: List[Optional[int]]


@router.get("/quiz")
async def get_quiz():
    story = get_current_story()
    return {"story_id": story.id, "questions": quiz_service.get_quiz(story)}


@router.post("/quiz/grade")
async def grade_quiz(submission: QuizSubmission):
    story = get_current_story()
    try:
        result = quiz_service.grade(story, submission.answers)
    except QuizError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.info(f"Quiz graded: {result['score']}/{result['total']}")
    return result
