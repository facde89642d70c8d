from uuid import UUID
from sqlalchemy.orm import Session
from tutorcenter.models.group_db.group_db import GroupMembership
from tutorcenter.models.quiz_db.quiz_submission_db import QuizSubmission
from tutorcenter.models.user_db.user_db import User
from tutorcenter.schemas.users.user_base import UserCreate, UserUpdate
from tutorcenter.core.security import hash_password
from typing import List


def create_user(db: Session, user: UserCreate):
    db_user = User(
        username=user.username,
        hashed_password=hash_password(user.password),
        role=user.role.value,
        category=user.category.value if user.category else None,
        level=user.level.value if user.level else None,
        is_active=True,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()


def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()


def get_all_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    return db.query(User).order_by(User.username.asc()).offset(skip).limit(limit).all()


def update_user(db: Session, user_id: UUID, updates: UserUpdate):
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    user.username = updates.username or user.username
    if updates.password:
        user.hashed_password = hash_password(updates.password)
    user.role = updates.role.value if updates.role else user.role
    user.category = updates.category.value if updates.category else user.category
    user.level = updates.level.value if updates.level else user.level
    user.is_active = updates.is_active if updates.is_active is not None else user.is_active

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: UUID):
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    db.query(GroupMembership).filter(GroupMembership.user_id == user_id).delete()
    db.query(QuizSubmission).filter(QuizSubmission.user_id == user_id).delete()
    db.delete(user)
    db.commit()
    return user
