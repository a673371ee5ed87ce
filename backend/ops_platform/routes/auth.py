from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, field_validator
from typing import Optional
from ops_platform.database import get_db
from ops_platform.dependencies import get_current_user
from ops_platform.models.user import WorkspaceUser
from ops_platform.services import auth_service

router = APIRouter()


class SignupRequest(BaseModel):
    email: str
    password: str
    workspace_name: str
    full_name: Optional[str] = None
    address: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        # bcrypt only looks at the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot be longer than 72 characters")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    """Sign up - create a draft workspace and its owner"""
    return auth_service.register_owner(
        db,
        email=data.email,
        password=data.password,
        workspace_name=data.workspace_name,
        full_name=data.full_name,
        address=data.address,
        timezone=data.timezone,
    )


@router.post("/login")
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, credentials.email, credentials.password)


@router.get("/me")
def me(user: WorkspaceUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return auth_service.get_me(db, user.id)
