import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from tutorcenter.core.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    title = Column(String, nullable=False)
    category = Column(String, nullable=False)  # act | sat | est | all
    level = Column(String, nullable=False, default="basics")  # advanced | basics | all
    type = Column(String, nullable=False, default="quiz")  # quiz | homework
    time_limit_minutes = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    deadline = Column(DateTime(timezone=True), nullable=True)
    target_users = Column(JSONType, nullable=True)  # [user_id, ...]
    target_groups = Column(JSONType, nullable=True)  # [group_id, ...]
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    questions = relationship("QuizQuestion", back_populates="quiz", cascade="all, delete-orphan")
    submissions = relationship("QuizSubmission", back_populates="quiz", cascade="all, delete-orphan")
