from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from church_registry.auth.service import AuthService
from church_registry.auth.utils import decode_access_token
from church_registry.common.db import get_db
from church_registry.common.scope_validation import CurrentUser, UserRole, require_admin
from church_registry.core.errors import UnauthorizedError

security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> UUID:
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    try:
        return UUID(user_id)
    except ValueError as e:
        raise UnauthorizedError("Invalid token payload") from e


def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the caller from the token subject.

    Role and wereda unit are read from the user row, so a deactivated or
    reassigned user takes effect without reissuing tokens.
    """
    user = AuthService.get_active_user(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found or inactive")
    return CurrentUser(
        id=user.id,
        role=UserRole(user.role),
        wereda_id=user.wereda_unit_id,
    )


def get_current_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    require_admin(current_user)
    return current_user
