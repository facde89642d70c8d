from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tutorcenter.core.database import get_db
from tutorcenter.core.security import require_admin
from tutorcenter.models.group_db.group_crud import (
    add_member,
    create_group,
    delete_group,
    get_all_groups,
    get_group_by_id,
    get_group_by_name,
    get_member_ids,
    remove_member,
)
from tutorcenter.models.group_db.group_db import Group
from tutorcenter.models.user_db.user_db_crud import get_user_by_id
from tutorcenter.schemas.group.group_base import GroupCreate, GroupMemberIn, GroupOut
from tutorcenter.services.categories import Role

group_router = APIRouter(prefix="/groups", tags=["Groups"], dependencies=[Depends(require_admin)])


def _group_out(db: Session, group: Group) -> GroupOut:
    return GroupOut(
        id=group.id,
        name=group.name,
        description=group.description,
        created_at=group.created_at,
        member_ids=get_member_ids(db, group.id),
    )


@group_router.post("/", response_model=GroupOut)
def create_group_route(group_in: GroupCreate, db: Session = Depends(get_db)):
    if get_group_by_name(db, group_in.name):
        raise HTTPException(status_code=400, detail="Group name already exists")
    return _group_out(db, create_group(db, group_in))


@group_router.get("/", response_model=List[GroupOut])
def list_groups(db: Session = Depends(get_db)):
    return [_group_out(db, g) for g in get_all_groups(db)]


@group_router.delete("/{group_id}")
def delete_group_route(group_id: UUID, db: Session = Depends(get_db)):
    if not delete_group(db, group_id):
        raise HTTPException(status_code=404, detail="Group not found")
    return {"message": "Group deleted successfully"}


@group_router.post("/{group_id}/members", response_model=GroupOut)
def add_member_route(group_id: UUID, payload: GroupMemberIn, db: Session = Depends(get_db)):
    group = get_group_by_id(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    user = get_user_by_id(db, payload.user_id)
    if not user or user.role != Role.student.value:
        raise HTTPException(status_code=404, detail="Student not found")
    add_member(db, group_id, payload.user_id)
    return _group_out(db, group)


@group_router.delete("/{group_id}/members/{user_id}", response_model=GroupOut)
def remove_member_route(group_id: UUID, user_id: UUID, db: Session = Depends(get_db)):
    group = get_group_by_id(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    if not remove_member(db, group_id, user_id):
        raise HTTPException(status_code=404, detail="Membership not found")
    return _group_out(db, group)
