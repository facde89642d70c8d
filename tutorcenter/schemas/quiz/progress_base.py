from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from tutorcenter.schemas.quiz.attempt_base import GradedQuestionOut
from tutorcenter.services.categories import QuizType


class SubmissionRecord(BaseModel):
    user_id: UUID
    username: str
    category: Optional[str] = None
    level: str
    quiz_id: UUID
    quiz_title: str
    quiz_type: QuizType
    score: int
    total_questions: int
    percentage: int
    submitted_at: Optional[datetime] = None


class SubmissionDetail(SubmissionRecord):
    breakdown: List[GradedQuestionOut]


class ScoreUpdate(BaseModel):
    score: int = Field(..., ge=0)
