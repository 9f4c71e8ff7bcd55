"""Pydantic schemas for parishes."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from church_registry.common.schemas import (
    PHONE_PATTERN,
    Address,
    AddressIn,
    APIModel,
    Pagination,
)


class ContactPerson(APIModel):
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    role: Optional[str] = Field(None, max_length=100)


class ParishAddressUpdate(APIModel):
    region: Optional[str] = Field(None, min_length=1, max_length=100)
    zone: Optional[str] = Field(None, max_length=100)
    woreda: Optional[str] = Field(None, max_length=100)
    kebele: Optional[str] = Field(None, max_length=100)

    @field_validator("region")
    @classmethod
    def region_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may not be null")
        return v


class ParishCreateRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: AddressIn
    contact_person: Optional[ContactPerson] = None
    under: UUID


class ParishUpdateRequest(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[ParishAddressUpdate] = None
    contact_person: Optional[ContactPerson] = None
    under: Optional[UUID] = None

    @field_validator("name", "under")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class ParishResponse(APIModel):
    id: UUID
    name: str
    address: Address
    contact_person: ContactPerson
    under: UUID
    created_at: datetime
    updated_at: datetime


class ParishListData(APIModel):
    parishes: list[ParishResponse]
    pagination: Pagination


class ParishesByWeredaData(APIModel):
    wereda: UUID
    count: int
    parishes: list[ParishResponse]
