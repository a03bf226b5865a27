"""
Story-related data models.
"""

from typing import List
from pydantic import BaseModel, Field, model_validator


class QuizQuestion(BaseModel):
    """A multiple-choice question about the story."""

    question: str
    options: List[str] = Field(..., min_length=2, max_length=6)
    answer_index: int = Field(..., ge=0)
    explanation: str = ""

    @model_validator(mode="after")
    def check_answer_in_options(self) -> "QuizQuestion":
        if self.answer_index >= len(self.options):
            raise ValueError("answer_index must point at one of the options")
        return self


class StoryData(BaseModel):
    """Static record describing one Bible story presented by the site."""

    id: str
    title_prefix: str
    title_highlight: str
    chapter_ref: str
    reference: str
    theme: str
    background_image: str
    ai_context: str
    text: str
    quiz: List[QuizQuestion] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def title(self) -> str:
        return f"{self.title_prefix} {self.title_highlight}"

    @property
    def paragraphs(self) -> List[str]:
        return [p.strip() for p in self.text.split("\n\n") if p.strip()]


class QuickPrompt(BaseModel):
    """A recommended topic button of the study companion."""

    key: str
    label: str
    prompt: str
