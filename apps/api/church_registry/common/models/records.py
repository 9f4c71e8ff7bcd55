"""Sacramental and life-event records (baptism, marriage, death)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import uuid4, UUID

from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    UniqueConstraint,
    Index,
    TIMESTAMP,
    Uuid,
    Date,
)
from sqlalchemy.orm import Mapped, mapped_column

from church_registry.common.models.base import Base, utcnow


class BaptismRecord(Base):
    """Baptism of a member, at most one per member."""

    __tablename__ = "baptism_records"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    member_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    baptism_date: Mapped[date] = mapped_column(Date, nullable=False)
    parish_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("parishes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    baptized_by_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    parent_name: Mapped[str] = mapped_column(String(200), nullable=False)
    parent_phone: Mapped[Optional[str]] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (Index("ix_baptism_records_baptism_date", "baptism_date"),)


class MarriageRecord(Base):
    """Marriage between a male and a female member."""

    __tablename__ = "marriage_records"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    husband_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    wife_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    marriage_date: Mapped[date] = mapped_column(Date, nullable=False)
    marriage_place: Mapped[Optional[str]] = mapped_column(String(200))
    church_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("parishes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    divorce_date: Mapped[Optional[date]] = mapped_column(Date)
    divorce_reason: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        UniqueConstraint(
            "husband_id", "wife_id", name="uq_marriage_records_husband_wife"
        ),
        Index("ix_marriage_records_marriage_date", "marriage_date"),
    )


class DeathRecord(Base):
    """Death of a member, at most one per member."""

    __tablename__ = "death_records"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid4
    )
    member_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    date_of_death: Mapped[date] = mapped_column(Date, nullable=False)
    grave_location_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("parishes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (Index("ix_death_records_date_of_death", "date_of_death"),)
