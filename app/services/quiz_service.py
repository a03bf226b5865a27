"""
Bible quiz for the presented story.
"""

from typing import Any, Dict, List, Optional

from app.exceptions import QuizError
from app.models.story_models import StoryData


def get_quiz(story: StoryData) -> List[Dict[str, Any]]:
    """Questions and options, without the answers."""
    return [
        {"index": i, "question": q.question, "options": list(q.options)}
        for i, q in enumerate(story.quiz)
    ]


def grade(story: StoryData, answers: List[Optional[int]]) -> Dict[str, Any]:
    """
    Grade one answer per question. ``None`` marks an unanswered question.

    Raises:
        QuizError: if the number of answers differs from the number of questions.
    """
    if len(answers) != len(story.quiz):
        raise QuizError(
            f"Expected {len(story.quiz)} answers, got {len(answers)}",
            error_code="ANSWER_COUNT_MISMATCH",
        )

    results = []
    for i, (question, answer) in enumerate(zip(story.quiz, answers)):
        correct = answer == question.answer_index
        results.append({
            "index": i,
            "selected": answer,
            "correct": correct,
            "answer_index": question.answer_index,
            "explanation": question.explanation,
        })

    score = sum(1 for r in results if r["correct"])
    return {"score": score, "total": len(results), "results": results}
