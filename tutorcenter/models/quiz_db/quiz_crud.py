import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tutorcenter.core.errors import (
    DuplicateSubmissionError,
    InvalidScoreError,
    QuizLoadError,
    QuizNotFoundError,
    SubmissionWriteError,
)
from tutorcenter.models.quiz_db.quiz_db import Quiz
from tutorcenter.models.quiz_db.quiz_question_db import QuizQuestion
from tutorcenter.models.quiz_db.quiz_submission_db import QuizSubmission
from tutorcenter.models.user_db.user_db import User
from tutorcenter.schemas.quiz.quiz_base import QuizCreate, QuizUpdate, QuestionCreate, QuestionUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionData:
    """Detached copy of a question row, safe to keep after the session closes."""

    id: str
    question: str
    choice_a: str
    choice_b: str
    choice_c: str
    choice_d: str
    correct_answer: str

    def choice_text(self, letter: str) -> str | None:
        return getattr(self, f"choice_{letter}", None)


@dataclass(frozen=True)
class LoadedQuiz:
    id: str
    title: str
    category: str
    level: str
    type: str
    time_limit_minutes: int
    deadline: Optional[datetime]
    questions: List[QuestionData] = field(default_factory=list)
    target_users: Optional[List[str]] = None
    target_groups: Optional[List[str]] = None

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(quiz, now: Optional[datetime] = None) -> bool:
    deadline = to_utc(quiz.deadline)
    if deadline is None:
        return False
    return deadline < (now or datetime.now(timezone.utc))


# ---- Quiz loader ----

def get_questions(db: Session, quiz_id: UUID) -> List[QuizQuestion]:
    return (
        db.query(QuizQuestion)
        .filter(QuizQuestion.quiz_id == quiz_id)
        .order_by(QuizQuestion.created_at.asc(), QuizQuestion.position.asc())
        .all()
    )


def load_quiz(db: Session, quiz_id: UUID) -> LoadedQuiz:
    try:
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if quiz is None:
            raise QuizNotFoundError(quiz_id)
        rows = get_questions(db, quiz_id)
    except SQLAlchemyError as exc:
        logger.error("Error fetching quiz %s: %s", quiz_id, exc)
        raise QuizLoadError(f"Could not load quiz {quiz_id}") from exc

    questions = [
        QuestionData(
            id=str(q.id),
            question=q.question,
            choice_a=q.choice_a,
            choice_b=q.choice_b,
            choice_c=q.choice_c,
            choice_d=q.choice_d,
            correct_answer=q.correct_answer,
        )
        for q in rows
    ]
    return LoadedQuiz(
        id=str(quiz.id),
        title=quiz.title,
        category=quiz.category,
        level=quiz.level,
        type=quiz.type,
        time_limit_minutes=quiz.time_limit_minutes or 0,
        deadline=to_utc(quiz.deadline),
        questions=questions,
        target_users=quiz.target_users,
        target_groups=quiz.target_groups,
    )


# ---- Submission writer ----

def get_submission(db: Session, user_id: UUID, quiz_id: UUID) -> Optional[QuizSubmission]:
    return (
        db.query(QuizSubmission)
        .filter(QuizSubmission.user_id == user_id, QuizSubmission.quiz_id == quiz_id)
        .first()
    )


def _existing_submission(db: Session, user_id: UUID, quiz_id: UUID) -> bool:
    try:
        return get_submission(db, user_id, quiz_id) is not None
    except SQLAlchemyError:
        return False


def write_submission(
    db: Session,
    user_id: UUID,
    quiz_id: UUID,
    total_questions: int,
    answers: Dict[str, str],
    score: int,
) -> QuizSubmission:
    submission = QuizSubmission(
        user_id=user_id,
        quiz_id=quiz_id,
        score=score,
        total_questions=total_questions,
        answers=dict(answers),
        submitted_at=datetime.now(timezone.utc),
    )
    try:
        db.add(submission)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # only the (user, quiz) unique constraint means "already submitted";
        # a foreign key failure means the quiz or user is gone
        if _existing_submission(db, user_id, quiz_id):
            logger.warning("Duplicate submission user=%s quiz=%s", user_id, quiz_id)
            raise DuplicateSubmissionError(user_id, quiz_id) from exc
        logger.error("Integrity error submitting quiz %s for user %s: %s", quiz_id, user_id, exc)
        raise SubmissionWriteError(f"Could not save submission for quiz {quiz_id}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error submitting quiz %s for user %s: %s", quiz_id, user_id, exc)
        raise SubmissionWriteError(f"Could not save submission for quiz {quiz_id}") from exc

    db.refresh(submission)
    logger.info("Quiz %s submitted by %s: %s/%s", quiz_id, user_id, score, total_questions)
    return submission


def get_user_submissions(db: Session, user_id: UUID) -> List[QuizSubmission]:
    return db.query(QuizSubmission).filter(QuizSubmission.user_id == user_id).all()


def get_quiz_submissions(db: Session, quiz_id: UUID) -> List[QuizSubmission]:
    return db.query(QuizSubmission).filter(QuizSubmission.quiz_id == quiz_id).all()


def get_all_submissions(db: Session) -> List[Tuple[QuizSubmission, User, Quiz]]:
    """Every submission with its student and quiz, newest first."""
    return (
        db.query(QuizSubmission, User, Quiz)
        .join(User, User.id == QuizSubmission.user_id)
        .join(Quiz, Quiz.id == QuizSubmission.quiz_id)
        .order_by(QuizSubmission.submitted_at.desc())
        .all()
    )


def update_submission_score(db: Session, user_id: UUID, quiz_id: UUID, score: int) -> Optional[QuizSubmission]:
    submission = get_submission(db, user_id, quiz_id)
    if not submission:
        return None
    if score < 0 or score > submission.total_questions:
        raise InvalidScoreError(score, submission.total_questions)

    previous = submission.score
    submission.score = score
    db.commit()
    db.refresh(submission)
    logger.info("Score for quiz %s (user %s) changed %s -> %s", quiz_id, user_id, previous, score)
    return submission


# ---- Quiz management ----

def _target_ids(ids) -> Optional[List[str]]:
    # empty selections mean "no explicit targeting"
    if not ids:
        return None
    return [str(i) for i in ids]


def get_quiz_by_id(db: Session, quiz_id: UUID) -> Optional[Quiz]:
    return db.query(Quiz).filter(Quiz.id == quiz_id).first()


def get_all_quizzes(db: Session) -> List[Quiz]:
    return db.query(Quiz).order_by(Quiz.created_at.desc()).all()


def count_questions(db: Session, quiz_ids: List[UUID]) -> Dict[UUID, int]:
    if not quiz_ids:
        return {}
    rows = (
        db.query(QuizQuestion.quiz_id, func.count(QuizQuestion.id))
        .filter(QuizQuestion.quiz_id.in_(quiz_ids))
        .group_by(QuizQuestion.quiz_id)
        .all()
    )
    return {quiz_id: count for quiz_id, count in rows}


def _new_question(quiz_id: UUID, data: QuestionCreate, position: int) -> QuizQuestion:
    return QuizQuestion(
        quiz_id=quiz_id,
        question=data.question,
        choice_a=data.choice_a,
        choice_b=data.choice_b,
        choice_c=data.choice_c,
        choice_d=data.choice_d,
        correct_answer=data.correct_answer.value,
        position=position,
    )


def create_quiz(db: Session, quiz_in: QuizCreate) -> Quiz:
    quiz = Quiz(
        title=quiz_in.title,
        category=quiz_in.category.value,
        level=quiz_in.level.value,
        type=quiz_in.type.value,
        time_limit_minutes=quiz_in.time_limit_minutes,
        deadline=to_utc(quiz_in.deadline),
        target_users=_target_ids(quiz_in.target_users),
        target_groups=_target_ids(quiz_in.target_groups),
    )
    db.add(quiz)
    db.flush()
    for position, q in enumerate(quiz_in.questions):
        db.add(_new_question(quiz.id, q, position))
    db.commit()
    db.refresh(quiz)
    return quiz


def update_quiz(db: Session, quiz_id: UUID, quiz_in: QuizUpdate) -> Optional[Quiz]:
    quiz = get_quiz_by_id(db, quiz_id)
    if not quiz:
        return None

    quiz.title = quiz_in.title
    quiz.category = quiz_in.category.value
    quiz.level = quiz_in.level.value
    quiz.type = quiz_in.type.value
    quiz.time_limit_minutes = quiz_in.time_limit_minutes
    quiz.deadline = to_utc(quiz_in.deadline)
    quiz.target_users = _target_ids(quiz_in.target_users)
    quiz.target_groups = _target_ids(quiz_in.target_groups)

    db.commit()
    db.refresh(quiz)
    return quiz


def delete_quiz(db: Session, quiz_id: UUID) -> Optional[Quiz]:
    quiz = get_quiz_by_id(db, quiz_id)
    if not quiz:
        return None
    db.delete(quiz)
    db.commit()
    return quiz


def add_question(db: Session, quiz_id: UUID, data: QuestionCreate) -> QuizQuestion:
    position = db.query(QuizQuestion).filter(QuizQuestion.quiz_id == quiz_id).count()
    question = _new_question(quiz_id, data, position)
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def update_question(db: Session, question_id: UUID, data: QuestionUpdate) -> Optional[QuizQuestion]:
    question = db.query(QuizQuestion).filter(QuizQuestion.id == question_id).first()
    if not question:
        return None

    question.question = data.question
    question.choice_a = data.choice_a
    question.choice_b = data.choice_b
    question.choice_c = data.choice_c
    question.choice_d = data.choice_d
    question.correct_answer = data.correct_answer.value

    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question_id: UUID) -> Optional[QuizQuestion]:
    question = db.query(QuizQuestion).filter(QuizQuestion.id == question_id).first()
    if not question:
        return None
    db.delete(question)
    db.commit()
    return question
