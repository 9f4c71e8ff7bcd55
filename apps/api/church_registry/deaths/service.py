"""Service layer for death records.

Creating, updating or deleting a death record also updates the member's
live status; both changes are committed in one transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_registry.common.consistency import (
    ensure_no_death_record,
    mark_member_deceased,
    revert_member_alive,
    validate_death_date,
)
from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import DeathRecord, Member
from church_registry.common.query import apply_date_range, paginate, parse_sort
from church_registry.common.references import EntityType, get_or_404, require_reference
from church_registry.common.schemas import Pagination
from church_registry.common.scope_validation import (
    CurrentUser,
    ensure_member_access,
    ensure_parish_access,
    ensure_wereda_access,
    member_wereda_id,
    scoped_member_ids,
)
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "date_of_death": DeathRecord.date_of_death,
    "created_at": DeathRecord.created_at,
}
DEFAULT_SORT = "-date_of_death"

DUPLICATE_DEATH = "Death record already exists for this member."


class DeathService:
    """Service for managing death records."""

    @staticmethod
    def _resolve_grave_location(db: Session, value: Any) -> Optional[UUID]:
        if value is None:
            return None
        return require_reference(
            db, EntityType.PARISH, value, field="graveLocation"
        ).id

    @staticmethod
    def create_death(
        db: Session,
        user: CurrentUser,
        data: dict[str, Any],
        today: Optional[date] = None,
    ) -> DeathRecord:
        """
        Record a member's death and mark the member Deceased.

        Raises:
            ReferenceAPIError: If the member or grave location does not resolve
            ForbiddenError: If a wereda admin names a member outside their unit
            DuplicateError: If the member already has a death record
            ValidationAPIError: If the date is in the future or precedes birth
        """
        member = require_reference(db, EntityType.MEMBER, data["member"], field="member")
        ensure_member_access(
            db, user, member, "You are not authorized to create this death record."
        )
        grave_location_id = DeathService._resolve_grave_location(
            db, data.get("grave_location")
        )
        ensure_no_death_record(db, member.id)
        validate_death_date(member, data["date_of_death"], today or date.today())

        death = DeathRecord(
            member_id=member.id,
            date_of_death=data["date_of_death"],
            grave_location_id=grave_location_id,
        )
        db.add(death)
        db.flush()
        mark_member_deceased(member, death)
        commit_or_duplicate(db, DUPLICATE_DEATH)
        db.refresh(death)

        logger.info("Death record %s created for member %s", death.id, member.id)
        emit_record_event("death_record", "created")
        return death

    @staticmethod
    def get_death(db: Session, user: CurrentUser, death_id: UUID) -> DeathRecord:
        death = get_or_404(db, EntityType.DEATH, death_id)
        member = db.get(Member, death.member_id)
        ensure_wereda_access(
            user,
            member_wereda_id(db, member) if member else None,
            "You are not authorized to access this death record.",
        )
        return death

    @staticmethod
    def update_death(
        db: Session,
        user: CurrentUser,
        death_id: UUID,
        changes: dict[str, Any],
        today: Optional[date] = None,
    ) -> DeathRecord:
        """Apply a partial update; an empty ``changes`` is a no-op."""
        death = DeathService.get_death(db, user, death_id)
        if not changes:
            return death

        member = db.get(Member, death.member_id)
        if "grave_location" in changes:
            death.grave_location_id = DeathService._resolve_grave_location(
                db, changes["grave_location"]
            )
        if "date_of_death" in changes:
            validate_death_date(member, changes["date_of_death"], today or date.today())
            death.date_of_death = changes["date_of_death"]
        mark_member_deceased(member, death)
        db.commit()
        db.refresh(death)

        logger.info("Death record %s updated: %s", death.id, sorted(changes))
        emit_record_event("death_record", "updated")
        return death

    @staticmethod
    def delete_death(db: Session, user: CurrentUser, death_id: UUID) -> None:
        """Delete a death record and return the member to Active."""
        death = DeathService.get_death(db, user, death_id)
        member = db.get(Member, death.member_id)
        if member is not None:
            revert_member_alive(member)
            db.flush()
        db.delete(death)
        db.commit()

        logger.info("Death record %s deleted", death_id)
        emit_record_event("death_record", "deleted")

    @staticmethod
    def list_deaths(
        db: Session,
        user: CurrentUser,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        member: Optional[str] = None,
        grave_location: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> tuple[list[DeathRecord], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)

        stmt = select(DeathRecord)
        if not user.is_admin:
            stmt = stmt.where(DeathRecord.member_id.in_(scoped_member_ids(user)))
        if member:
            member_row = require_reference(db, EntityType.MEMBER, member, field="member")
            ensure_member_access(db, user, member_row)
            stmt = stmt.where(DeathRecord.member_id == member_row.id)
        if grave_location:
            parish = require_reference(
                db, EntityType.PARISH, grave_location, field="graveLocation"
            )
            ensure_parish_access(db, user, parish.id)
            stmt = stmt.where(DeathRecord.grave_location_id == parish.id)
        stmt = apply_date_range(stmt, DeathRecord.date_of_death, start_date, end_date)

        return paginate(db, stmt, page, limit, order_by, DeathRecord.id)
