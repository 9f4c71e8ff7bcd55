from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_admin, get_current_user
from church_registry.auth.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserInfoResponse,
)
from church_registry.auth.service import AuthService
from church_registry.common.db import get_db
from church_registry.common.models import User
from church_registry.common.schemas import Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.core.errors import UnauthorizedError

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_info(user: User) -> UserInfoResponse:
    return UserInfoResponse(
        id=user.id,
        username=user.username,
        role=user.role,
        wereda_unit=user.wereda_unit_id,
        is_active=user.is_active,
        last_login=user.last_login,
    )


@router.post("/login", response_model=Envelope[TokenResponse])
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = AuthService.authenticate_user(db, request.username, request.password)
    if not user:
        raise UnauthorizedError("Invalid username or password")

    access_token = AuthService.create_session(db, user)
    return Envelope(
        data=TokenResponse(access_token=access_token, user=_user_info(user)),
        message="Login successful",
    )


@router.post(
    "/register",
    response_model=Envelope[UserInfoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Create an API user (admin only)."""
    user = AuthService.register_user(
        db,
        username=request.username,
        password=request.password,
        role=request.role,
        wereda_unit_id=request.wereda_unit,
    )
    return Envelope(data=_user_info(user), message="User registered successfully")


@router.get("/me", response_model=Envelope[UserInfoResponse])
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.get(User, current_user.id)
    return Envelope(data=_user_info(user), message="")
