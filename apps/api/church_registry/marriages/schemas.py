"""Pydantic schemas for marriage records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from church_registry.common.schemas import APIModel, Pagination


class MarriageCreateRequest(APIModel):
    husband: UUID
    wife: UUID
    marriage_date: date
    marriage_place: Optional[str] = Field(None, min_length=2, max_length=200)
    church: Optional[UUID] = None
    is_active: bool = True
    divorce_date: Optional[date] = None
    divorce_reason: Optional[str] = Field(None, min_length=2, max_length=500)


class MarriageUpdateRequest(APIModel):
    husband: Optional[UUID] = None
    wife: Optional[UUID] = None
    marriage_date: Optional[date] = None
    marriage_place: Optional[str] = Field(None, min_length=2, max_length=200)
    church: Optional[UUID] = None
    is_active: Optional[bool] = None
    divorce_date: Optional[date] = None
    divorce_reason: Optional[str] = Field(None, min_length=2, max_length=500)

    @field_validator("husband", "wife", "marriage_date", "is_active")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class DivorceRequest(APIModel):
    divorce_date: date
    divorce_reason: Optional[str] = Field(None, min_length=2, max_length=500)


class MarriageResponse(APIModel):
    id: UUID
    husband: UUID
    wife: UUID
    marriage_date: date
    marriage_place: Optional[str] = None
    church: Optional[UUID] = None
    is_active: bool
    divorce_date: Optional[date] = None
    divorce_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MarriageListData(APIModel):
    marriages: list[MarriageResponse]
    pagination: Pagination
