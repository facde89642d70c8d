from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from tutorcenter.models.group_db.group_db import Group, GroupMembership
from tutorcenter.schemas.group.group_base import GroupCreate


def create_group(db: Session, group_in: GroupCreate) -> Group:
    group = Group(name=group_in.name, description=group_in.description)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def get_group_by_id(db: Session, group_id: UUID) -> Optional[Group]:
    return db.query(Group).filter(Group.id == group_id).first()


def get_group_by_name(db: Session, name: str) -> Optional[Group]:
    return db.query(Group).filter(Group.name == name).first()


def get_all_groups(db: Session) -> List[Group]:
    return db.query(Group).order_by(Group.name.asc()).all()


def delete_group(db: Session, group_id: UUID) -> Optional[Group]:
    group = get_group_by_id(db, group_id)
    if not group:
        return None
    db.delete(group)
    db.commit()
    return group


def get_member_ids(db: Session, group_id: UUID) -> List[UUID]:
    rows = db.query(GroupMembership.user_id).filter(GroupMembership.group_id == group_id).all()
    return [row[0] for row in rows]


def get_group_ids_for_user(db: Session, user_id: UUID) -> List[UUID]:
    rows = db.query(GroupMembership.group_id).filter(GroupMembership.user_id == user_id).all()
    return [row[0] for row in rows]


def add_member(db: Session, group_id: UUID, user_id: UUID) -> GroupMembership:
    existing = (
        db.query(GroupMembership)
        .filter(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
        .first()
    )
    if existing:
        return existing

    membership = GroupMembership(group_id=group_id, user_id=user_id)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership


def remove_member(db: Session, group_id: UUID, user_id: UUID) -> Optional[GroupMembership]:
    membership = (
        db.query(GroupMembership)
        .filter(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
        .first()
    )
    if not membership:
        return None
    db.delete(membership)
    db.commit()
    return membership
