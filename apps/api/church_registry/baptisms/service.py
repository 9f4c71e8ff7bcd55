"""Service layer for baptism records."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import BaptismRecord
from church_registry.common.query import apply_date_range, paginate, parse_sort
from church_registry.common.references import EntityType, get_or_404, require_reference
from church_registry.common.schemas import Pagination
from church_registry.common.scope_validation import (
    CurrentUser,
    ensure_member_access,
    ensure_parish_access,
    scoped_parish_ids,
)
from church_registry.core.errors import DuplicateError
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "baptism_date": BaptismRecord.baptism_date,
    "created_at": BaptismRecord.created_at,
}
DEFAULT_SORT = "-baptism_date"

DUPLICATE_BAPTISM = "Baptism record already exists for this member."
WRONG_PARISH = "You are not authorized to access baptism records of this parish."


class BaptismService:
    """Service for managing baptism records."""

    @staticmethod
    def _ensure_not_baptized(
        db: Session, member_id: UUID, exclude_id: Optional[UUID] = None
    ) -> None:
        stmt = select(BaptismRecord.id).where(BaptismRecord.member_id == member_id)
        if exclude_id is not None:
            stmt = stmt.where(BaptismRecord.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise DuplicateError(DUPLICATE_BAPTISM, details={"member": str(member_id)})

    @staticmethod
    def create_baptism(
        db: Session, user: CurrentUser, data: dict[str, Any]
    ) -> BaptismRecord:
        """
        Record a member's baptism.

        Raises:
            ReferenceAPIError: If the member, parish or officiant does not resolve
            ForbiddenError: If a wereda admin names a parish outside their unit
            DuplicateError: If the member already has a baptism record
        """
        member = require_reference(db, EntityType.MEMBER, data["member"], field="member")
        parish = require_reference(db, EntityType.PARISH, data["parish"], field="parish")
        ensure_parish_access(db, user, parish.id, WRONG_PARISH)
        baptized_by_id = None
        if data.get("baptized_by") is not None:
            baptized_by_id = require_reference(
                db, EntityType.MEMBER, data["baptized_by"], field="baptizedBy"
            ).id
        BaptismService._ensure_not_baptized(db, member.id)

        contact = data["parent_contact"]
        baptism = BaptismRecord(
            member_id=member.id,
            baptism_date=data["baptism_date"],
            parish_id=parish.id,
            baptized_by_id=baptized_by_id,
            parent_name=contact["name"],
            parent_phone=contact.get("phone"),
        )
        db.add(baptism)
        commit_or_duplicate(db, DUPLICATE_BAPTISM)
        db.refresh(baptism)

        logger.info("Baptism record %s created for member %s", baptism.id, member.id)
        emit_record_event("baptism_record", "created")
        return baptism

    @staticmethod
    def get_baptism(db: Session, user: CurrentUser, baptism_id: UUID) -> BaptismRecord:
        baptism = get_or_404(db, EntityType.BAPTISM, baptism_id)
        ensure_parish_access(
            db, user, baptism.parish_id, "You are not authorized to access this baptism record."
        )
        return baptism

    @staticmethod
    def update_baptism(
        db: Session, user: CurrentUser, baptism_id: UUID, changes: dict[str, Any]
    ) -> BaptismRecord:
        """Apply a partial update; an empty ``changes`` is a no-op."""
        baptism = BaptismService.get_baptism(db, user, baptism_id)
        if not changes:
            return baptism

        if "member" in changes:
            member = require_reference(
                db, EntityType.MEMBER, changes["member"], field="member"
            )
            if member.id != baptism.member_id:
                BaptismService._ensure_not_baptized(db, member.id, exclude_id=baptism.id)
                baptism.member_id = member.id
        if "parish" in changes:
            parish = require_reference(
                db, EntityType.PARISH, changes["parish"], field="parish"
            )
            ensure_parish_access(db, user, parish.id, WRONG_PARISH)
            baptism.parish_id = parish.id
        if "baptized_by" in changes:
            baptism.baptized_by_id = None
            if changes["baptized_by"] is not None:
                baptism.baptized_by_id = require_reference(
                    db, EntityType.MEMBER, changes["baptized_by"], field="baptizedBy"
                ).id
        if "baptism_date" in changes:
            baptism.baptism_date = changes["baptism_date"]
        contact = changes.get("parent_contact") or {}
        if "name" in contact:
            baptism.parent_name = contact["name"]
        if "phone" in contact:
            baptism.parent_phone = contact["phone"]

        commit_or_duplicate(db, DUPLICATE_BAPTISM)
        db.refresh(baptism)

        logger.info("Baptism record %s updated: %s", baptism.id, sorted(changes))
        emit_record_event("baptism_record", "updated")
        return baptism

    @staticmethod
    def list_baptisms(
        db: Session,
        user: CurrentUser,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        member: Optional[str] = None,
        parish: Optional[str] = None,
        baptized_by: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> tuple[list[BaptismRecord], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)

        stmt = select(BaptismRecord)
        if not user.is_admin:
            stmt = stmt.where(BaptismRecord.parish_id.in_(scoped_parish_ids(user)))
        if member:
            member_row = require_reference(db, EntityType.MEMBER, member, field="member")
            ensure_member_access(db, user, member_row)
            stmt = stmt.where(BaptismRecord.member_id == member_row.id)
        if parish:
            parish_row = require_reference(db, EntityType.PARISH, parish, field="parish")
            ensure_parish_access(db, user, parish_row.id, WRONG_PARISH)
            stmt = stmt.where(BaptismRecord.parish_id == parish_row.id)
        if baptized_by:
            officiant = require_reference(
                db, EntityType.MEMBER, baptized_by, field="baptizedBy"
            )
            ensure_member_access(db, user, officiant)
            stmt = stmt.where(BaptismRecord.baptized_by_id == officiant.id)
        stmt = apply_date_range(stmt, BaptismRecord.baptism_date, start_date, end_date)

        return paginate(db, stmt, page, limit, order_by, BaptismRecord.id)
