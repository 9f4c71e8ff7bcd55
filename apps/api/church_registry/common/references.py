"""Foreign-key resolution shared by every service.

Each check is a fresh point lookup; nothing is cached.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from church_registry.common.models import (
    Base,
    BaptismRecord,
    DeathRecord,
    MarriageRecord,
    Member,
    Parish,
    WeredaUnit,
)
from church_registry.core.errors import NotFoundError, ReferenceAPIError


class EntityType(str, Enum):
    WEREDA = "wereda"
    PARISH = "parish"
    MEMBER = "member"
    BAPTISM = "baptism"
    MARRIAGE = "marriage"
    DEATH = "death"


# Entity type -> (model, human label)
ENTITY_MAPPING: dict[EntityType, tuple[type[Base], str]] = {
    EntityType.WEREDA: (WeredaUnit, "WeredaUnit"),
    EntityType.PARISH: (Parish, "Parish"),
    EntityType.MEMBER: (Member, "Member"),
    EntityType.BAPTISM: (BaptismRecord, "Baptism record"),
    EntityType.MARRIAGE: (MarriageRecord, "Marriage record"),
    EntityType.DEATH: (DeathRecord, "Death record"),
}


def parse_id(value: Union[UUID, str, None]) -> Optional[UUID]:
    """Return ``value`` as a UUID, or None if it is missing or malformed."""
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def get_reference(
    db: Session, entity_type: EntityType, value: Union[UUID, str, None]
) -> Optional[Any]:
    entity_id = parse_id(value)
    if entity_id is None:
        return None
    model, _ = ENTITY_MAPPING[entity_type]
    return db.get(model, entity_id)


def exists(db: Session, entity_type: EntityType, value: Union[UUID, str, None]) -> bool:
    """Return True if ``value`` is a well-formed id of an existing entity."""
    return get_reference(db, entity_type, value) is not None


def require_reference(
    db: Session,
    entity_type: EntityType,
    value: Union[UUID, str, None],
    field: Optional[str] = None,
) -> Any:
    """
    Resolve a foreign key from a payload or filter.

    Returns:
        The referenced row

    Raises:
        ReferenceAPIError: If the id is malformed or does not exist
    """
    entity = get_reference(db, entity_type, value)
    if entity is None:
        _, label = ENTITY_MAPPING[entity_type]
        raise ReferenceAPIError(label, value, field=field)
    return entity


def get_or_404(db: Session, entity_type: EntityType, entity_id: UUID) -> Any:
    """Load the entity addressed by a path parameter."""
    model, label = ENTITY_MAPPING[entity_type]
    entity = db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(label, str(entity_id))
    return entity
