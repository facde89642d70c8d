import logging
import os

from sqlalchemy.orm import Session
from tutorcenter.core.database import Base, SessionLocal, engine
from tutorcenter.core.logging_config import configure_logging
from tutorcenter.models.quiz_db.quiz_crud import create_quiz
from tutorcenter.models.quiz_db.quiz_db import Quiz
from tutorcenter.models.user_db.user_db_crud import create_user, get_user_by_username
from tutorcenter.schemas.quiz.quiz_base import QuizCreate
from tutorcenter.schemas.users.user_base import UserCreate
from tutorcenter.services.categories import Role

logger = logging.getLogger(__name__)


sample_quiz = {
    "title": "SAT Math Warm-up",
    "category": "sat",
    "level": "all",
    "type": "quiz",
    "time_limit_minutes": 10,
    "questions": [
        {
            "question": "If 3x + 5 = 20, what is x?",
            "choice_a": "3",
            "choice_b": "5",
            "choice_c": "15",
            "choice_d": "25",
            "correct_answer": "b",
        },
        {
            "question": "What is 15% of 200?",
            "choice_a": "15",
            "choice_b": "20",
            "choice_c": "30",
            "choice_d": "35",
            "correct_answer": "c",
        },
        {
            "question": "A rectangle is 4 by 9. What is its area?",
            "choice_a": "36",
            "choice_b": "26",
            "choice_c": "13",
            "choice_d": "18",
            "correct_answer": "a",
        },
    ],
}


def seed_admin(db: Session, username: str, password: str):
    existing = get_user_by_username(db, username)
    if existing:
        return existing
    admin = create_user(db, UserCreate(username=username, password=password, role=Role.admin))
    logger.info("Admin account %s created", username)
    return admin


def seed_sample_quiz(db: Session):
    existing = db.query(Quiz).filter(Quiz.title == sample_quiz["title"]).first()
    if existing:
        return existing
    quiz = create_quiz(db, QuizCreate(**sample_quiz))
    logger.info("Sample quiz %s seeded", quiz.id)
    return quiz


def main():
    configure_logging()
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    try:
        seed_admin(db, os.environ.get("ADMIN_USERNAME", "admin"), os.environ["ADMIN_PASSWORD"])
        seed_sample_quiz(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
