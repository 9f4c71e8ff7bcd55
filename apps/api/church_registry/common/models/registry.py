"""Hierarchy and member models (wereda units, parishes, members)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import uuid4, UUID

from sqlalchemy import (
    String,
    ForeignKey,
    Index,
    TIMESTAMP,
    Uuid,
    Date,
)
from sqlalchemy.orm import Mapped, mapped_column

from church_registry.common.models.base import (
    Base,
    Gender,
    LiveStatus,
    MemberRole,
    EducationLevel,
    utcnow,
)


class WeredaUnit(Base):
    """Geographic administrative unit, the root of the hierarchy."""

    __tablename__ = "wereda_units"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    zone: Mapped[str] = mapped_column(String(100), nullable=False)
    woreda: Mapped[str] = mapped_column(String(100), nullable=False)
    kebele: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("ix_wereda_units_region_zone_woreda", "region", "zone", "woreda"),
    )


class Parish(Base):
    """Parish ("Atbiya") under a wereda unit."""

    __tablename__ = "parishes"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    zone: Mapped[Optional[str]] = mapped_column(String(100))
    woreda: Mapped[Optional[str]] = mapped_column(String(100))
    kebele: Mapped[Optional[str]] = mapped_column(String(100))
    contact_name: Mapped[Optional[str]] = mapped_column(String(200))
    contact_phone: Mapped[Optional[str]] = mapped_column(String(16))
    contact_role: Mapped[Optional[str]] = mapped_column(String(100))
    under_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("wereda_units.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )


class Member(Base):
    """Individual member ("Believer") record."""

    __tablename__ = "members"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    father_name: Mapped[Optional[str]] = mapped_column(String(100))
    grandfather_name: Mapped[Optional[str]] = mapped_column(String(100))
    gender: Mapped[str] = mapped_column(Gender, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    christianity_name: Mapped[Optional[str]] = mapped_column(String(100))
    education_level: Mapped[Optional[str]] = mapped_column(EducationLevel)
    role: Mapped[str] = mapped_column(MemberRole, nullable=False, default="Member")
    live_status: Mapped[str] = mapped_column(
        LiveStatus, nullable=False, default="Active"
    )
    # NULLs never collide, so only present phones are unique
    phone: Mapped[Optional[str]] = mapped_column(String(16), unique=True)
    emergency_phone: Mapped[Optional[str]] = mapped_column(String(16))
    parish_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("parishes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    mother_name: Mapped[Optional[str]] = mapped_column(String(100))
    mother_father_name: Mapped[Optional[str]] = mapped_column(String(100))
    soul_father_name: Mapped[Optional[str]] = mapped_column(String(100))
    photo_url: Mapped[Optional[str]] = mapped_column(String(500))
    death_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey(
            "death_records.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_members_death_id_death_records",
        ),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("ix_members_names", "first_name", "father_name", "grandfather_name"),
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.father_name, self.grandfather_name]
        return " ".join(part for part in parts if part)

    def age_on(self, today: date) -> int:
        years = today.year - self.date_of_birth.year
        if (today.month, today.day) < (
            self.date_of_birth.month,
            self.date_of_birth.day,
        ):
            years -= 1
        return years
