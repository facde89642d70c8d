from pydantic import BaseModel

from tutorcenter.schemas.users.user_base import UserOut


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: UserOut
    token: str
    token_type: str = "bearer"
