import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tutorcenter.core.database import get_db
from tutorcenter.core.security import (
    verify_password,
    create_access_token,
    get_current_user
)
from tutorcenter.models.user_db.user_db import User
from tutorcenter.models.user_db.user_db_crud import get_user_by_username
from tutorcenter.schemas.login.login_base import LoginRequest, LoginResponse
from tutorcenter.schemas.users.user_base import UserOut

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_username(db, payload.username)
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.info("Failed login for %s", payload.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_access_token({"sub": str(user.id), "role": user.role})
    return LoginResponse(user=UserOut.model_validate(user), token=token)


@auth_router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
