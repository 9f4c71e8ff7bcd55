"""Service layer for members."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from church_registry.common.consistency import (
    validate_gender_change,
    validate_live_status_change,
)
from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import (
    BaptismRecord,
    DeathRecord,
    MarriageRecord,
    Member,
)
from church_registry.common.query import icontains, paginate, parse_sort
from church_registry.common.references import EntityType, get_or_404, require_reference
from church_registry.common.schemas import Pagination
from church_registry.common.scope_validation import (
    CurrentUser,
    ensure_member_access,
    ensure_parish_access,
    require_admin,
    scoped_parish_ids,
)
from church_registry.core.errors import DuplicateError, ValidationAPIError
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "first_name": Member.first_name,
    "father_name": Member.father_name,
    "grandfather_name": Member.grandfather_name,
    "date_of_birth": Member.date_of_birth,
    "gender": Member.gender,
    "role": Member.role,
    "live_status": Member.live_status,
    "created_at": Member.created_at,
}
DEFAULT_SORT = "first_name"

DUPLICATE_PHONE = "Phone number already in use."


def years_ago(today: date, years: int) -> date:
    """Same calendar day ``years`` earlier; Feb 29 falls back to Feb 28."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


class MemberService:
    """Service for managing members."""

    @staticmethod
    def _ensure_unique_phone(
        db: Session, phone: str, exclude_id: Optional[UUID] = None
    ) -> None:
        stmt = select(Member.id).where(Member.phone == phone)
        if exclude_id is not None:
            stmt = stmt.where(Member.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise DuplicateError(DUPLICATE_PHONE, details={"phone": phone})

    @staticmethod
    def _resolve_parish(
        db: Session, user: CurrentUser, parish_id: Optional[UUID]
    ) -> Optional[UUID]:
        """Validate the member's parish; members without one are admin-only."""
        if parish_id is None:
            require_admin(user)
            return None
        parish = require_reference(db, EntityType.PARISH, parish_id, field="parish")
        ensure_parish_access(
            db, user, parish.id, "You are not authorized to manage members of this parish."
        )
        return parish.id

    @staticmethod
    def create_member(db: Session, user: CurrentUser, data: dict[str, Any]) -> Member:
        data = dict(data)
        parish_id = MemberService._resolve_parish(db, user, data.pop("parish", None))
        if data.get("phone"):
            MemberService._ensure_unique_phone(db, data["phone"])

        member = Member(parish_id=parish_id, **data)
        db.add(member)
        commit_or_duplicate(db, DUPLICATE_PHONE)
        db.refresh(member)

        logger.info("Member %s created in parish %s", member.id, parish_id)
        emit_record_event("member", "created")
        return member

    @staticmethod
    def get_member(db: Session, user: CurrentUser, member_id: UUID) -> Member:
        member = get_or_404(db, EntityType.MEMBER, member_id)
        ensure_member_access(db, user, member)
        return member

    @staticmethod
    def update_member(
        db: Session, user: CurrentUser, member_id: UUID, changes: dict[str, Any]
    ) -> Member:
        """Apply a partial update; an empty ``changes`` is a no-op."""
        member = MemberService.get_member(db, user, member_id)
        if not changes:
            return member

        changes = dict(changes)
        if "parish" in changes:
            member.parish_id = MemberService._resolve_parish(
                db, user, changes.pop("parish")
            )
        if changes.get("phone") and changes["phone"] != member.phone:
            MemberService._ensure_unique_phone(db, changes["phone"], exclude_id=member.id)
        if "live_status" in changes:
            validate_live_status_change(db, member, changes["live_status"])
        if "gender" in changes:
            validate_gender_change(db, member, changes["gender"])
        if "date_of_birth" in changes and member.death_id is not None:
            death = db.get(DeathRecord, member.death_id)
            if death is not None and changes["date_of_birth"] > death.date_of_death:
                raise ValidationAPIError(
                    "Date of birth cannot be after the recorded date of death",
                    errors=[{"field": "dateOfBirth", "message": "after date of death"}],
                )

        for field, value in changes.items():
            setattr(member, field, value)

        commit_or_duplicate(db, DUPLICATE_PHONE)
        db.refresh(member)

        logger.info("Member %s updated: %s", member.id, sorted(changes))
        emit_record_event("member", "updated")
        return member

    @staticmethod
    def delete_member(db: Session, user: CurrentUser, member_id: UUID) -> None:
        """Delete a member along with their baptism, death and marriage records."""
        require_admin(user)
        member = get_or_404(db, EntityType.MEMBER, member_id)

        member.death_id = None
        db.flush()
        db.execute(
            update(BaptismRecord)
            .where(BaptismRecord.baptized_by_id == member.id)
            .values(baptized_by_id=None)
        )
        db.execute(delete(BaptismRecord).where(BaptismRecord.member_id == member.id))
        db.execute(delete(DeathRecord).where(DeathRecord.member_id == member.id))
        db.execute(
            delete(MarriageRecord).where(
                or_(
                    MarriageRecord.husband_id == member.id,
                    MarriageRecord.wife_id == member.id,
                )
            )
        )
        db.delete(member)
        db.commit()

        logger.info("Member %s deleted with dependent records", member_id)
        emit_record_event("member", "deleted")

    @staticmethod
    def _scoped_select(user: CurrentUser, *columns):
        stmt = select(*columns) if columns else select(Member)
        if not user.is_admin:
            stmt = stmt.where(Member.parish_id.in_(scoped_parish_ids(user)))
        return stmt

    @staticmethod
    def list_members(
        db: Session,
        user: CurrentUser,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        role: Optional[str] = None,
        live_status: Optional[str] = None,
        gender: Optional[str] = None,
        parish: Optional[str] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
        search: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[list[Member], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)
        today = today or date.today()

        stmt = MemberService._scoped_select(user)
        if parish:
            parish_row = require_reference(db, EntityType.PARISH, parish, field="parish")
            ensure_parish_access(
                db, user, parish_row.id, "You are not authorized to access members of this parish."
            )
            stmt = stmt.where(Member.parish_id == parish_row.id)
        if role:
            stmt = stmt.where(Member.role == role)
        if live_status:
            stmt = stmt.where(Member.live_status == live_status)
        if gender:
            stmt = stmt.where(Member.gender == gender)
        if min_age is not None:
            stmt = stmt.where(Member.date_of_birth <= years_ago(today, min_age))
        if max_age is not None:
            stmt = stmt.where(Member.date_of_birth > years_ago(today, max_age + 1))
        if search:
            stmt = stmt.where(
                or_(
                    icontains(Member.first_name, search),
                    icontains(Member.father_name, search),
                    icontains(Member.grandfather_name, search),
                    icontains(Member.christianity_name, search),
                )
            )

        return paginate(db, stmt, page, limit, order_by, Member.id)

    @staticmethod
    def get_statistics(db: Session, user: CurrentUser) -> dict[str, Any]:
        """Total member count and counts by gender within the caller's scope."""
        stmt = MemberService._scoped_select(
            user, Member.gender, func.count(Member.id)
        ).group_by(Member.gender).order_by(Member.gender)
        rows = db.execute(stmt).all()
        by_gender = [{"gender": gender, "count": count} for gender, count in rows]
        return {
            "total": sum(row["count"] for row in by_gender),
            "by_gender": by_gender,
        }
