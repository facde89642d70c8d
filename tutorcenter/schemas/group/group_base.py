from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class GroupOut(GroupCreate):
    id: UUID
    created_at: datetime
    member_ids: List[UUID] = []

    class Config:
        from_attributes = True


class GroupMemberIn(BaseModel):
    user_id: UUID
