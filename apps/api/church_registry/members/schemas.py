"""Pydantic schemas for members."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Optional
from uuid import UUID

from pydantic import AfterValidator, Field, field_validator

from church_registry.common.models.base import EDUCATION_LEVELS, MEMBER_ROLES
from church_registry.common.schemas import (
    PHONE_PATTERN,
    PHOTO_URL_PATTERN,
    APIModel,
    Pagination,
)

GenderValue = Literal["Male", "Female"]
LiveStatusValue = Literal["Active", "Deceased", "Transfer"]

REQUIRED_FIELDS = ("first_name", "gender", "date_of_birth", "role", "live_status")


def _check_role(v: str) -> str:
    if v not in MEMBER_ROLES:
        raise ValueError(f"must be one of: {', '.join(MEMBER_ROLES)}")
    return v


def _check_education_level(v: str) -> str:
    if v not in EDUCATION_LEVELS:
        raise ValueError(f"must be one of: {', '.join(EDUCATION_LEVELS)}")
    return v


def _check_date_of_birth(v: date) -> date:
    if v > date.today():
        raise ValueError("Date of birth cannot be in the future")
    return v


RoleValue = Annotated[str, AfterValidator(_check_role)]
EducationLevelValue = Annotated[str, AfterValidator(_check_education_level)]
BirthDate = Annotated[date, AfterValidator(_check_date_of_birth)]


class MemberFields(APIModel):
    father_name: Optional[str] = Field(None, max_length=100)
    grandfather_name: Optional[str] = Field(None, max_length=100)
    christianity_name: Optional[str] = Field(None, max_length=100)
    education_level: Optional[EducationLevelValue] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    emergency_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    parish: Optional[UUID] = None
    mother_name: Optional[str] = Field(None, max_length=100)
    mother_father_name: Optional[str] = Field(None, max_length=100)
    soul_father_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500, pattern=PHOTO_URL_PATTERN)


class MemberCreateRequest(MemberFields):
    first_name: str = Field(..., min_length=1, max_length=100)
    gender: GenderValue
    date_of_birth: BirthDate
    role: RoleValue = "Member"
    live_status: LiveStatusValue = "Active"


class MemberUpdateRequest(MemberFields):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[GenderValue] = None
    date_of_birth: Optional[BirthDate] = None
    role: Optional[RoleValue] = None
    live_status: Optional[LiveStatusValue] = None

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class MemberResponse(APIModel):
    id: UUID
    first_name: str
    father_name: Optional[str] = None
    grandfather_name: Optional[str] = None
    full_name: str
    gender: str
    date_of_birth: date
    age: int
    christianity_name: Optional[str] = None
    education_level: Optional[str] = None
    role: str
    live_status: str
    phone: Optional[str] = None
    emergency_phone: Optional[str] = None
    parish: Optional[UUID] = None
    mother_name: Optional[str] = None
    mother_father_name: Optional[str] = None
    soul_father_name: Optional[str] = None
    photo_url: Optional[str] = None
    death: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class MemberListData(APIModel):
    members: list[MemberResponse]
    pagination: Pagination


class GenderCount(APIModel):
    gender: str
    count: int


class MemberStatistics(APIModel):
    total: int
    by_gender: list[GenderCount]
