import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from birthday_api.database import get_db
from birthday_api.models.user import User
from birthday_api.schemas.user import RegisterRequest, UserResponse
from birthday_api.utils.response import handle_exception

router = APIRouter(prefix="/api", tags=["Users"])
logger = logging.getLogger(__name__)


@router.post("/register")
def register_user(body: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = User(**body.model_dump(mode="json"))
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user id=%s", user.id)
        return UserResponse.serialize(user)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc)


# Mock login: the password only has to be present, it is never compared
@router.post("/login")
def login_user(body: Any = Body(default=None), db: Session = Depends(get_db)):
    try:
        body = body if isinstance(body, dict) else {}
        email = body.get("email")
        password = body.get("password")
        if not (isinstance(email, str) and email) or not (isinstance(password, str) and password):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")

        user = db.query(User).filter(User.email == email).first()
        if not user:
            logger.info("Login attempt for unknown email")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        return UserResponse.serialize(user)
    except Exception as exc:
        return handle_exception(exc)
