"""Pydantic schemas for baptism records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from church_registry.common.schemas import PHONE_PATTERN, APIModel, Pagination


class ParentContact(APIModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class ParentContactUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may not be null")
        return v


class BaptismCreateRequest(APIModel):
    member: UUID
    baptism_date: date
    parish: UUID
    baptized_by: Optional[UUID] = None
    parent_contact: ParentContact


class BaptismUpdateRequest(APIModel):
    member: Optional[UUID] = None
    baptism_date: Optional[date] = None
    parish: Optional[UUID] = None
    baptized_by: Optional[UUID] = None
    parent_contact: Optional[ParentContactUpdate] = None

    @field_validator("member", "baptism_date", "parish", "parent_contact")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class BaptismResponse(APIModel):
    id: UUID
    member: UUID
    baptism_date: date
    parish: UUID
    baptized_by: Optional[UUID] = None
    parent_contact: ParentContact
    created_at: datetime
    updated_at: datetime


class BaptismListData(APIModel):
    baptisms: list[BaptismResponse]
    pagination: Pagination
