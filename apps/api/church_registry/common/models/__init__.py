"""Models package - re-exports every model and enum.

Models are organized into:
- base: Base class, metadata, enums and value sets
- iam: API user accounts
- registry: hierarchy and member models (wereda units, parishes, members)
- records: baptism, marriage and death records
"""

from __future__ import annotations

from church_registry.common.models.base import (
    Base,
    metadata,
    NAMING_CONVENTION,
    utcnow,
    # Value sets
    GENDERS,
    LIVE_STATUSES,
    MEMBER_ROLES,
    EDUCATION_LEVELS,
    USER_ROLES,
    # Enums
    Gender,
    LiveStatus,
    MemberRole,
    EducationLevel,
    UserRoleType,
)

from church_registry.common.models.iam import User

from church_registry.common.models.registry import (
    WeredaUnit,
    Parish,
    Member,
)

from church_registry.common.models.records import (
    BaptismRecord,
    MarriageRecord,
    DeathRecord,
)

__all__ = [
    # Base
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "utcnow",
    # Value sets
    "GENDERS",
    "LIVE_STATUSES",
    "MEMBER_ROLES",
    "EDUCATION_LEVELS",
    "USER_ROLES",
    # Enums
    "Gender",
    "LiveStatus",
    "MemberRole",
    "EducationLevel",
    "UserRoleType",
    # IAM
    "User",
    # Registry
    "WeredaUnit",
    "Parish",
    "Member",
    # Records
    "BaptismRecord",
    "MarriageRecord",
    "DeathRecord",
]
