"""Pydantic schemas for death records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import field_validator

from church_registry.common.schemas import APIModel, Pagination


class DeathCreateRequest(APIModel):
    member: UUID
    date_of_death: date
    grave_location: Optional[UUID] = None


class DeathUpdateRequest(APIModel):
    date_of_death: Optional[date] = None
    grave_location: Optional[UUID] = None

    @field_validator("date_of_death")
    @classmethod
    def date_not_null(cls, v: Optional[date]) -> date:
        if v is None:
            raise ValueError("may not be null")
        return v


class DeathResponse(APIModel):
    id: UUID
    member: UUID
    date_of_death: date
    grave_location: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class DeathListData(APIModel):
    deaths: list[DeathResponse]
    pagination: Pagination
