from pydantic import BaseModel, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from tutorcenter.services.categories import Role, Category, Level


class UserBase(BaseModel):
    username: str = Field(..., min_length=1)
    role: Role = Role.student
    category: Optional[Category] = None
    level: Optional[Level] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    category: Optional[Category] = None
    level: Optional[Level] = None
    is_active: Optional[bool] = None


class UserOut(UserBase):
    id: UUID
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
