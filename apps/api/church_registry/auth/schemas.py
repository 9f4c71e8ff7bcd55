from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from church_registry.common.schemas import APIModel
from church_registry.common.scope_validation import UserRole


class LoginRequest(APIModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class RegisterRequest(APIModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.WEREDA_ADMIN
    wereda_unit: Optional[UUID] = None

    @model_validator(mode="after")
    def check_wereda_unit(self) -> "RegisterRequest":
        if self.role is UserRole.WEREDA_ADMIN and self.wereda_unit is None:
            raise ValueError("wereda_admin users require a wereda unit")
        return self


class UserInfoResponse(APIModel):
    id: UUID
    username: str
    role: UserRole
    wereda_unit: Optional[UUID] = None
    is_active: bool
    last_login: Optional[datetime] = None


class TokenResponse(APIModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfoResponse
