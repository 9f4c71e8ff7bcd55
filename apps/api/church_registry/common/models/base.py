"""Base classes and enums shared across all models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Enum, MetaData
from sqlalchemy.orm import DeclarativeBase


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    metadata = metadata


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Value sets, shared with the request schemas
GENDERS = ("Male", "Female")
LIVE_STATUSES = ("Active", "Deceased", "Transfer")
MEMBER_ROLES = (
    "Admin",
    "Priest",
    "Deacon",
    "Choir Member",
    "Sunday School Student",
    "Sunday School Teacher",
    "Treasurer",
    "Secretary",
    "Member",
    "Guest",
)
EDUCATION_LEVELS = tuple(f"Grade {n}" for n in range(1, 13)) + ("College",)
USER_ROLES = ("admin", "wereda_admin")

# Enums
Gender = Enum(*GENDERS, name="gender")
LiveStatus = Enum(*LIVE_STATUSES, name="live_status")
MemberRole = Enum(*MEMBER_ROLES, name="member_role")
EducationLevel = Enum(*EDUCATION_LEVELS, name="education_level")
UserRoleType = Enum(*USER_ROLES, name="user_role")
