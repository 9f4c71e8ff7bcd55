"""Cross-entity rules for members and their life-event records.

Helpers here mutate ORM objects in the caller's session and never commit;
the calling service commits the record and its cascade together.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from church_registry.common.models import DeathRecord, MarriageRecord, Member
from church_registry.core.errors import DuplicateError, ValidationAPIError

logger = logging.getLogger(__name__)

DECEASED = "Deceased"
ACTIVE = "Active"


def _invalid(field: str, message: str) -> ValidationAPIError:
    return ValidationAPIError(message, errors=[{"field": field, "message": message}])


# Death


def validate_death_date(member: Member, date_of_death: date, today: date) -> None:
    """
    Check ``date_of_death`` against today and the member's birth date.

    Raises:
        ValidationAPIError: If the date is in the future or precedes birth
    """
    if date_of_death > today:
        raise _invalid("dateOfDeath", "Date of death cannot be in the future")
    if date_of_death < member.date_of_birth:
        raise _invalid(
            "dateOfDeath", "Date of death cannot be before the member's date of birth"
        )


def ensure_no_death_record(db: Session, member_id: UUID) -> None:
    existing = db.execute(
        select(DeathRecord.id).where(DeathRecord.member_id == member_id)
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateError(
            "Death record already exists for this member.",
            details={"member_id": str(member_id), "death_id": str(existing)},
        )


def mark_member_deceased(member: Member, death: DeathRecord) -> None:
    member.live_status = DECEASED
    member.death_id = death.id
    logger.info("Member %s marked deceased (death record %s)", member.id, death.id)


def revert_member_alive(member: Member) -> None:
    member.live_status = ACTIVE
    member.death_id = None
    logger.info("Member %s reverted to active", member.id)


def validate_live_status_change(
    db: Session, member: Member, live_status: Optional[str]
) -> None:
    """A member with a death record stays Deceased."""
    if live_status is None or live_status == DECEASED:
        return
    has_death = db.execute(
        select(DeathRecord.id).where(DeathRecord.member_id == member.id)
    ).scalar_one_or_none()
    if has_death is not None:
        raise _invalid(
            "liveStatus",
            "Member has a death record; delete it before changing the live status",
        )


def validate_gender_change(db: Session, member: Member, gender: Optional[str]) -> None:
    """A married member keeps the gender of their side of the marriage."""
    if gender is None or gender == member.gender:
        return
    sides = []
    if gender != "Male":
        sides.append(MarriageRecord.husband_id == member.id)
    if gender != "Female":
        sides.append(MarriageRecord.wife_id == member.id)
    conflict = db.execute(
        select(MarriageRecord.id).where(or_(*sides))
    ).first()
    if conflict is not None:
        raise _invalid(
            "gender",
            "Member is a partner in a marriage record; gender cannot change",
        )


# Marriage


def validate_marriage_partners(husband: Member, wife: Member) -> None:
    """
    Raises:
        ValidationAPIError: If the husband is not Male or the wife is not Female
    """
    if husband.id == wife.id:
        raise _invalid("wife", "Husband and wife must be different members")
    if husband.gender != "Male":
        raise _invalid("husband", "Husband must be a male member")
    if wife.gender != "Female":
        raise _invalid("wife", "Wife must be a female member")


def ensure_unique_marriage(
    db: Session,
    husband_id: UUID,
    wife_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> None:
    stmt = select(MarriageRecord.id).where(
        MarriageRecord.husband_id == husband_id,
        MarriageRecord.wife_id == wife_id,
    )
    if exclude_id is not None:
        stmt = stmt.where(MarriageRecord.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise DuplicateError(
            "Marriage record already exists for this couple.",
            details={"husband": str(husband_id), "wife": str(wife_id)},
        )


def normalize_marriage_state(state: dict) -> dict:
    """
    Apply the divorce rules to the merged marriage fields.

    ``state`` holds ``marriage_date``, ``is_active``, ``divorce_date`` and
    ``divorce_reason``. A divorce date forces ``is_active`` to False.

    Returns:
        The state with ``is_active`` adjusted

    Raises:
        ValidationAPIError: If the divorce fields are inconsistent
    """
    marriage_date = state["marriage_date"]
    divorce_date = state.get("divorce_date")

    if divorce_date is not None:
        if divorce_date <= marriage_date:
            raise _invalid("divorceDate", "Divorce date must be after marriage date")
        state["is_active"] = False
    else:
        if state.get("divorce_reason"):
            raise _invalid(
                "divorceReason", "Divorce reason requires a divorce date"
            )
        if state.get("is_active") is False:
            raise _invalid(
                "divorceDate", "An inactive marriage requires a divorce date"
            )
        state["is_active"] = True
    return state
