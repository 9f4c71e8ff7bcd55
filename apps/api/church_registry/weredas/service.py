"""Service layer for wereda units."""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import WeredaUnit
from church_registry.common.query import icontains, paginate, parse_sort
from church_registry.common.references import EntityType, get_or_404
from church_registry.common.schemas import Pagination
from church_registry.common.scope_validation import CurrentUser, ensure_wereda_access
from church_registry.core.errors import DuplicateError
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "name": WeredaUnit.name,
    "region": WeredaUnit.region,
    "zone": WeredaUnit.zone,
    "woreda": WeredaUnit.woreda,
    "created_at": WeredaUnit.created_at,
}
DEFAULT_SORT = "name"

DUPLICATE_NAME = "A wereda unit with this name already exists."


class WeredaService:
    """Service for managing wereda units."""

    @staticmethod
    def _ensure_unique_name(
        db: Session, name: str, exclude_id: Optional[UUID] = None
    ) -> None:
        stmt = select(WeredaUnit.id).where(WeredaUnit.name == name)
        if exclude_id is not None:
            stmt = stmt.where(WeredaUnit.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise DuplicateError(DUPLICATE_NAME, details={"name": name})

    @staticmethod
    def create_wereda(db: Session, name: str, address: dict[str, str]) -> WeredaUnit:
        WeredaService._ensure_unique_name(db, name)

        wereda = WeredaUnit(name=name, **address)
        db.add(wereda)
        commit_or_duplicate(db, DUPLICATE_NAME)
        db.refresh(wereda)

        logger.info("Wereda unit %s created (%s)", wereda.id, wereda.name)
        emit_record_event("wereda_unit", "created")
        return wereda

    @staticmethod
    def get_wereda(db: Session, user: CurrentUser, wereda_id: UUID) -> WeredaUnit:
        wereda = get_or_404(db, EntityType.WEREDA, wereda_id)
        ensure_wereda_access(user, wereda.id)
        return wereda

    @staticmethod
    def update_wereda(
        db: Session, wereda_id: UUID, changes: dict[str, Any]
    ) -> WeredaUnit:
        """Apply a partial update; an empty ``changes`` is a no-op."""
        wereda = get_or_404(db, EntityType.WEREDA, wereda_id)
        if not changes:
            return wereda

        if "name" in changes and changes["name"] != wereda.name:
            WeredaService._ensure_unique_name(db, changes["name"], exclude_id=wereda.id)
            wereda.name = changes["name"]
        for field, value in (changes.get("address") or {}).items():
            setattr(wereda, field, value)

        commit_or_duplicate(db, DUPLICATE_NAME)
        db.refresh(wereda)

        logger.info("Wereda unit %s updated: %s", wereda.id, sorted(changes))
        emit_record_event("wereda_unit", "updated")
        return wereda

    @staticmethod
    def list_weredas(
        db: Session,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        name: Optional[str] = None,
        region: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[WeredaUnit], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)

        stmt = select(WeredaUnit)
        if name:
            stmt = stmt.where(icontains(WeredaUnit.name, name))
        if region:
            stmt = stmt.where(icontains(WeredaUnit.region, region))
        if search:
            stmt = stmt.where(
                or_(
                    icontains(WeredaUnit.name, search),
                    icontains(WeredaUnit.region, search),
                    icontains(WeredaUnit.zone, search),
                    icontains(WeredaUnit.woreda, search),
                    icontains(WeredaUnit.kebele, search),
                )
            )

        return paginate(db, stmt, page, limit, order_by, WeredaUnit.id)
