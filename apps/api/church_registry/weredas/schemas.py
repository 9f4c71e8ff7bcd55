"""Pydantic schemas for wereda units."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from church_registry.common.schemas import Address, APIModel, Pagination


class WeredaAddressIn(APIModel):
    region: str = Field(..., min_length=1, max_length=100)
    zone: str = Field(..., min_length=1, max_length=100)
    woreda: str = Field(..., min_length=1, max_length=100)
    kebele: str = Field(..., min_length=1, max_length=100)


class WeredaAddressUpdate(APIModel):
    region: Optional[str] = Field(None, min_length=1, max_length=100)
    zone: Optional[str] = Field(None, min_length=1, max_length=100)
    woreda: Optional[str] = Field(None, min_length=1, max_length=100)
    kebele: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("region", "zone", "woreda", "kebele")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may not be null")
        return v


class WeredaCreateRequest(APIModel):
    name: str = Field(..., min_length=3, max_length=200)
    address: WeredaAddressIn


class WeredaUpdateRequest(APIModel):
    name: Optional[str] = Field(None, min_length=3, max_length=200)
    address: Optional[WeredaAddressUpdate] = None

    @field_validator("name", "address")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class WeredaResponse(APIModel):
    id: UUID
    name: str
    address: Address
    created_at: datetime
    updated_at: datetime


class WeredaListData(APIModel):
    weredas: list[WeredaResponse]
    pagination: Pagination
