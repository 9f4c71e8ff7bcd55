"""Service layer for parishes."""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import Parish
from church_registry.common.query import icontains, paginate, parse_sort
from church_registry.common.references import EntityType, get_or_404, require_reference
from church_registry.common.schemas import Pagination
from church_registry.common.scope_validation import CurrentUser, ensure_wereda_access
from church_registry.core.errors import DuplicateError
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "name": Parish.name,
    "region": Parish.region,
    "zone": Parish.zone,
    "created_at": Parish.created_at,
}
DEFAULT_SORT = "name"

DUPLICATE_NAME = "A parish with this name already exists."

# contact_person payload key -> column
CONTACT_COLUMNS = {
    "name": "contact_name",
    "phone": "contact_phone",
    "role": "contact_role",
}

WRONG_WEREDA = "You are not authorized to access parishes of this wereda unit."


class ParishService:
    """Service for managing parishes."""

    @staticmethod
    def _ensure_unique_name(
        db: Session, name: str, exclude_id: Optional[UUID] = None
    ) -> None:
        stmt = select(Parish.id).where(Parish.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Parish.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise DuplicateError(DUPLICATE_NAME, details={"name": name})

    @staticmethod
    def _apply_nested(parish: Parish, changes: dict[str, Any]) -> None:
        for field, value in (changes.get("address") or {}).items():
            setattr(parish, field, value)
        for field, value in (changes.get("contact_person") or {}).items():
            setattr(parish, CONTACT_COLUMNS[field], value)

    @staticmethod
    def create_parish(
        db: Session, user: CurrentUser, data: dict[str, Any]
    ) -> Parish:
        """
        Create a parish under an existing wereda unit.

        Raises:
            ReferenceAPIError: If ``under`` does not resolve
            ForbiddenError: If a wereda admin names another unit
            DuplicateError: If the name is taken
        """
        wereda = require_reference(db, EntityType.WEREDA, data["under"], field="under")
        ensure_wereda_access(user, wereda.id, WRONG_WEREDA)
        ParishService._ensure_unique_name(db, data["name"])

        parish = Parish(name=data["name"], under_id=wereda.id)
        ParishService._apply_nested(parish, data)
        db.add(parish)
        commit_or_duplicate(db, DUPLICATE_NAME)
        db.refresh(parish)

        logger.info("Parish %s created under wereda unit %s", parish.id, wereda.id)
        emit_record_event("parish", "created")
        return parish

    @staticmethod
    def get_parish(db: Session, user: CurrentUser, parish_id: UUID) -> Parish:
        parish = get_or_404(db, EntityType.PARISH, parish_id)
        ensure_wereda_access(
            user, parish.under_id, "You are not authorized to access this parish."
        )
        return parish

    @staticmethod
    def update_parish(
        db: Session, user: CurrentUser, parish_id: UUID, changes: dict[str, Any]
    ) -> Parish:
        """Apply a partial update; an empty ``changes`` is a no-op."""
        parish = ParishService.get_parish(db, user, parish_id)
        if not changes:
            return parish

        if "under" in changes and changes["under"] != parish.under_id:
            wereda = require_reference(
                db, EntityType.WEREDA, changes["under"], field="under"
            )
            ensure_wereda_access(
                user, wereda.id, "You cannot move a parish to another wereda unit."
            )
            parish.under_id = wereda.id
        if "name" in changes and changes["name"] != parish.name:
            ParishService._ensure_unique_name(db, changes["name"], exclude_id=parish.id)
            parish.name = changes["name"]
        ParishService._apply_nested(parish, changes)

        commit_or_duplicate(db, DUPLICATE_NAME)
        db.refresh(parish)

        logger.info("Parish %s updated: %s", parish.id, sorted(changes))
        emit_record_event("parish", "updated")
        return parish

    @staticmethod
    def list_parishes(
        db: Session,
        user: CurrentUser,
        page: int,
        limit: int,
        sort: Optional[str] = None,
        name: Optional[str] = None,
        region: Optional[str] = None,
        under: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Parish], Pagination]:
        order_by = parse_sort(sort, SORT_FIELDS, DEFAULT_SORT)

        stmt = select(Parish)
        if not user.is_admin:
            stmt = stmt.where(Parish.under_id == user.wereda_id)
        if under:
            wereda = require_reference(db, EntityType.WEREDA, under, field="under")
            ensure_wereda_access(user, wereda.id, WRONG_WEREDA)
            stmt = stmt.where(Parish.under_id == wereda.id)
        if name:
            stmt = stmt.where(icontains(Parish.name, name))
        if region:
            stmt = stmt.where(icontains(Parish.region, region))
        if search:
            stmt = stmt.where(
                or_(
                    icontains(Parish.name, search),
                    icontains(Parish.region, search),
                    icontains(Parish.contact_name, search),
                )
            )

        return paginate(db, stmt, page, limit, order_by, Parish.id)

    @staticmethod
    def list_by_wereda(
        db: Session, user: CurrentUser, wereda_id: UUID
    ) -> list[Parish]:
        """All parishes under one wereda unit, ordered by name."""
        wereda = get_or_404(db, EntityType.WEREDA, wereda_id)
        ensure_wereda_access(user, wereda.id, WRONG_WEREDA)
        return list(
            db.execute(
                select(Parish)
                .where(Parish.under_id == wereda.id)
                .order_by(Parish.name, Parish.id)
            ).scalars()
        )
