import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from tutorcenter.core.database import Base
from datetime import datetime, timezone


class User(Base):
    __tablename__ = "users"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    username = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="student")  # admin | student | parent
    category = Column(String, nullable=True)  # act | sat | est (students)
    level = Column(String, nullable=True)  # advanced | basics (students)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
