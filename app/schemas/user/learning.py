from typing import Optional

from pydantic import BaseModel, Field


class QuizSubmit(BaseModel):
    answers: list[Optional[int]] = Field(
        default_factory=list, description="Chosen option index per question, null = skipped"
    )
