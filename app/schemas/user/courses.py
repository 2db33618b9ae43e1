import uuid
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class LessonIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    video_url: Optional[str] = None
    content: Optional[str] = None
    materials: list[str] = Field(default_factory=list)
    duration: Optional[int] = Field(None, ge=0, description="Minutes")


class QuestionIn(BaseModel):
    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_answer_in_options(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index into options")
        return self


class QuizIn(BaseModel):
    lesson_index: Optional[int] = Field(None, ge=0)
    questions: list[QuestionIn] = Field(default_factory=list)


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=5000)
    reply_to: Optional[uuid.UUID] = None
