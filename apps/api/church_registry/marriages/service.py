"""Service layer for marriage records.

All marriage operations are admin-only; the routes enforce the role.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from church_registry.common.consistency import (
    ensure_unique_marriage,
    normalize_marriage_state,
    validate_marriage_partners,
)
from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import MarriageRecord
from church_registry.common.query import (
    apply_date_range,
    icontains,
    paginate,
    parse_sort,
)
from church_registry.common.references import EntityType, get_or_404, require_reference
from church_registry.common.schemas import Pagination
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "marriage_date": MarriageRecord.marriage_date,
    "divorce_date": MarriageRecord.divorce_date,
    "is_active": MarriageRecord.is_active,
    "created_at": MarriageRecord.created_at,
}
DEFAULT_SORT = "-marriage_date"

DUPLICATE_MARRIAGE = "Marriage record already exists for this couple."

# Fields checked together by the divorce rules
STATE_FIELDS = ("marriage_date", "is_active", "divorce_date", "divorce_reason")


class MarriageService:
    """Service for managing marriage records."""

    @staticmethod
    def _resolve_partners(db: Session, husband_id: Any, wife_id: Any):
        husband = require_reference(db, EntityType.MEMBER, husband_id, field="husband")
        wife = require_reference(db, EntityType.MEMBER, wife_id, field="wife")
        validate_marriage_partners(husband, wife)
        return husband, wife

    @staticmethod
    def create_marriage(db: Session, data: dict[str, Any]) -> MarriageRecord:
        """
        Record a marriage between a male and a female member.

        Raises:
            ReferenceAPIError: If a partner or the church does not resolve
            ValidationAPIError: On a gender mismatch or inconsistent divorce fields
            DuplicateError: If the couple already has a record
        """
        husband, wife = MarriageService._resolve_partners(
            db, data["husband"], data["wife"]
        )
        church_id = None
        if data.get("church") is not None:
            church_id = require_reference(
                db, EntityType.PARISH, data["church"], field="church"
            ).id
        state = normalize_marriage_state({field: data.get(field) for field in STATE_FIELDS})
        ensure_unique_marriage(db, husband.id, wife.id)

        marriage = MarriageRecord(
            husband_id=husband.id,
            wife_id=wife.id,
            marriage_place=data.get("marriage_place"),
            church_id=church_id,
            **state,
        )
        db.add(marriage)
        commit_or_duplicate(db, DUPLICATE_MARRIAGE)
        db.refresh(marriage)

        logger.info(
            "Marriage record %s created (husband %s, wife %s)",
            marriage.id,
            husband.id,
            wife.id,
        )
        emit_record_event("marriage_record", "created")
        return marriage

    @staticmethod
    def get_marriage(db: Session, marriage_id: UUID) -> MarriageRecord:
        return get_or_404(db, EntityType.MARRIAGE, marriage_id)

    @staticmethod
    def update_marriage(
        db: Session, marriage_id: UUID, changes: dict[str, Any]
    ) -> MarriageRecord:
        """Apply a partial update, validating the merged record before saving."""
        marriage = get_or_404(db, EntityType.MARRIAGE, marriage_id)
        if not changes:
            return marriage

        if "husband" in changes or "wife" in changes:
            husband, wife = MarriageService._resolve_partners(
                db,
                changes.get("husband", marriage.husband_id),
                changes.get("wife", marriage.wife_id),
            )
            ensure_unique_marriage(db, husband.id, wife.id, exclude_id=marriage.id)
            marriage.husband_id = husband.id
            marriage.wife_id = wife.id
        if "church" in changes:
            marriage.church_id = None
            if changes["church"] is not None:
                marriage.church_id = require_reference(
                    db, EntityType.PARISH, changes["church"], field="church"
                ).id
        if "marriage_place" in changes:
            marriage.marriage_place = changes["marriage_place"]

        state = {field: getattr(marriage, field) for field in STATE_FIELDS}
        state.update({k: v for k, v in changes.items() if k in STATE_FIELDS})
        if "divorce_date" not in changes and changes.get("is_active") is True:
            # Reactivating clears the divorce
            state["divorce_date"] = None
            state["divorce_reason"] = None
        for field, value in normalize_marriage_state(state).items():
            setattr(marriage, field, value)

        commit_or_duplicate(db, DUPLICATE_MARRIAGE)
        db.refresh(marriage)

        logger.info("Marriage record %s updated: %s", marriage.id, sorted(changes))
        emit_record_event("marriage_record", "updated")
        return marriage

    @staticmethod
    def divorce(
        db: Session,
        marriage_id: UUID,
        divorce_date: date,
        divorce_reason: Optional[str] = None,
    ) -> MarriageRecord:
        """Mark a marriage as dissolved on ``divorce_date``."""
        marriage = get_or_404(db, EntityType.MARRIAGE, marriage_id)
        state = normalize_marriage_state(
            {
                "marriage_date": marriage.marriage_date,
                "is_active": False,
                "divorce_date": divorce_date,
                "divorce_reason": divorce_reason,
            }
        )
        for field, value in state.items():
            setattr(marriage, field, value)
        db.commit()
        db.refresh(marriage)

        logger.info("Marriage record %s dissolved on %s", marriage.id, divorce_date)
        emit_record_event("marriage_record", "divorced")
        return marriage

    @staticmethod
    def list_marriages(
        db: Session,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        is_active: Optional[bool] = None,
        church: Optional[str] = None,
        husband: Optional[str] = None,
        wife: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> tuple[list[MarriageRecord], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)

        stmt = select(MarriageRecord)
        if is_active is not None:
            stmt = stmt.where(MarriageRecord.is_active.is_(is_active))
        if church:
            parish = require_reference(db, EntityType.PARISH, church, field="church")
            stmt = stmt.where(MarriageRecord.church_id == parish.id)
        if husband:
            member = require_reference(db, EntityType.MEMBER, husband, field="husband")
            stmt = stmt.where(MarriageRecord.husband_id == member.id)
        if wife:
            member = require_reference(db, EntityType.MEMBER, wife, field="wife")
            stmt = stmt.where(MarriageRecord.wife_id == member.id)
        stmt = apply_date_range(stmt, MarriageRecord.marriage_date, start_date, end_date)
        if search:
            stmt = stmt.where(
                or_(
                    icontains(MarriageRecord.marriage_place, search),
                    icontains(MarriageRecord.divorce_reason, search),
                )
            )

        return paginate(db, stmt, page, limit, order_by, MarriageRecord.id)
