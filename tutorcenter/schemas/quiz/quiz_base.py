from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator
from typing import List, Dict, Optional

from tutorcenter.services.categories import QuizCategory, QuizLevel, QuizType, Choice


class QuestionBase(BaseModel):
    question: str = Field(..., min_length=1)
    choice_a: str = Field(..., min_length=1)
    choice_b: str = Field(..., min_length=1)
    choice_c: str = Field(..., min_length=1)
    choice_d: str = Field(..., min_length=1)
    correct_answer: Choice = Choice.a

    @field_validator("question", "choice_a", "choice_b", "choice_c", "choice_d")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("All question fields are required")
        return value

    @field_validator("correct_answer", mode="before")
    @classmethod
    def lower_letter(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class QuestionCreate(QuestionBase):
    pass


class QuestionUpdate(QuestionBase):
    pass


class QuestionOut(QuestionBase):
    id: UUID
    quiz_id: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class QuizBase(BaseModel):
    title: str = Field(..., min_length=1)
    category: QuizCategory = QuizCategory.sat
    level: QuizLevel = QuizLevel.basics
    type: QuizType = QuizType.quiz
    time_limit_minutes: int = Field(0, ge=0)
    deadline: Optional[datetime] = None
    target_users: Optional[List[UUID]] = None
    target_groups: Optional[List[UUID]] = None


class QuizCreate(QuizBase):
    # "standard quiz": questions created together with the quiz
    questions: List[QuestionCreate] = []


class QuizUpdate(QuizBase):
    pass


class QuizOut(QuizBase):
    id: UUID
    created_at: datetime
    question_count: int = 0

    class Config:
        from_attributes = True


class QuizDetailOut(QuizOut):
    questions: List[QuestionOut] = []


class AssignedQuiz(BaseModel):
    id: UUID
    title: str
    type: QuizType
    created_at: datetime
    deadline: Optional[datetime] = None
    time_limit_minutes: int
    question_count: int
    status: str  # pending | completed | expired
    score: Optional[int] = None
    total_questions: Optional[int] = None
    submitted_at: Optional[datetime] = None


class AssignedQuizzes(BaseModel):
    pending: List[AssignedQuiz]
    completed: List[AssignedQuiz]
    expired: List[AssignedQuiz]


class TrackerEntry(BaseModel):
    user_id: UUID
    username: str
    score: Optional[int] = None
    total_questions: Optional[int] = None
    submitted_at: Optional[datetime] = None


class SubmissionTracker(BaseModel):
    quiz_id: UUID
    title: str
    submitted: List[TrackerEntry]
    not_submitted: List[TrackerEntry]


class SubmissionOut(BaseModel):
    id: UUID
    user_id: UUID
    quiz_id: UUID
    score: int
    total_questions: int
    answers: Dict[str, str]
    submitted_at: datetime

    class Config:
        from_attributes = True
