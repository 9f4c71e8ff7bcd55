"""Helpers for validating role and wereda scope access.

Two roles exist. An admin may act on everything. A wereda admin may act
only on rows whose wereda unit, resolved through the foreign-key chain
(member -> parish -> wereda unit), is the unit carried on their token.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from church_registry.common.models import Member, Parish
from church_registry.core.errors import ForbiddenError


class UserRole(str, Enum):
    ADMIN = "admin"
    WEREDA_ADMIN = "wereda_admin"


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity decoded from the bearer token."""

    id: UUID
    role: UserRole
    wereda_id: Optional[UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


def require_admin(user: CurrentUser) -> None:
    """
    Check that the caller is an admin.

    Raises:
        ForbiddenError: If the caller has any other role
    """
    if not user.is_admin:
        raise ForbiddenError("Not authorized. Admin access required.")


def has_wereda_access(user: CurrentUser, wereda_id: Optional[UUID]) -> bool:
    """Return True if the caller may act on rows belonging to ``wereda_id``.

    Rows that resolve to no wereda unit (e.g. a member with no parish) are
    reachable by admins only.
    """
    if user.is_admin:
        return True
    return (
        wereda_id is not None
        and user.wereda_id is not None
        and wereda_id == user.wereda_id
    )


def ensure_wereda_access(
    user: CurrentUser,
    wereda_id: Optional[UUID],
    message: str = "You are not authorized to access this wereda unit.",
) -> None:
    if not has_wereda_access(user, wereda_id):
        raise ForbiddenError(message)


def parish_wereda_id(db: Session, parish_id: Optional[UUID]) -> Optional[UUID]:
    """Resolve parish -> wereda unit."""
    if parish_id is None:
        return None
    parish = db.get(Parish, parish_id)
    return parish.under_id if parish else None


def member_wereda_id(db: Session, member: Member) -> Optional[UUID]:
    """Resolve member -> parish -> wereda unit."""
    return parish_wereda_id(db, member.parish_id)


def ensure_parish_access(
    db: Session,
    user: CurrentUser,
    parish_id: Optional[UUID],
    message: str = "You are not authorized to access records of this parish.",
) -> None:
    if user.is_admin:
        return
    ensure_wereda_access(user, parish_wereda_id(db, parish_id), message)


def ensure_member_access(
    db: Session,
    user: CurrentUser,
    member: Member,
    message: str = "You are not authorized to access this member.",
) -> None:
    if user.is_admin:
        return
    ensure_wereda_access(user, member_wereda_id(db, member), message)


def scoped_parish_ids(user: CurrentUser) -> Select:
    """Subquery of the parish ids inside the caller's wereda unit."""
    return select(Parish.id).where(Parish.under_id == user.wereda_id)


def scoped_member_ids(user: CurrentUser) -> Select:
    """Subquery of the member ids inside the caller's wereda unit."""
    return select(Member.id).where(Member.parish_id.in_(scoped_parish_ids(user)))
