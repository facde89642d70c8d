"""
Which students a quiz applies to.

A quiz reaches a student when its explicit user list names them, when its
group list shares a group with them, or, with neither list set, when its
category and level match the student's (``all`` matching anything).
"""

from typing import Iterable, List, Set
from uuid import UUID

from sqlalchemy.orm import Session

from tutorcenter.models.group_db.group_crud import get_group_ids_for_user, get_member_ids
from tutorcenter.models.user_db.user_db import User
from tutorcenter.services.categories import Level, Role

ALL = "all"


def _ids(values: Iterable | None) -> Set[str]:
    return {str(v) for v in values or []}


def user_group_ids(db: Session, user_id: UUID) -> Set[str]:
    return _ids(get_group_ids_for_user(db, user_id))


def quiz_targets_user(quiz, user, group_ids: Set[str]) -> bool:
    target_users = getattr(quiz, "target_users", None)
    target_groups = getattr(quiz, "target_groups", None)

    if str(user.id) in _ids(target_users):
        return True
    if _ids(target_groups) & _ids(group_ids):
        return True
    if target_users or target_groups:
        return False

    user_level = user.level or Level.basics.value
    return quiz.category in (user.category, ALL) and quiz.level in (user_level, ALL)


def targeted_students(db: Session, quiz) -> List[User]:
    students = (
        db.query(User)
        .filter(User.role == Role.student.value)
        .order_by(User.username.asc())
        .all()
    )
    group_members: dict = {}
    for group_id in _ids(quiz.target_groups):
        for user_id in get_member_ids(db, UUID(group_id)):
            group_members.setdefault(str(user_id), set()).add(group_id)

    return [s for s in students if quiz_targets_user(quiz, s, group_members.get(str(s.id), set()))]
