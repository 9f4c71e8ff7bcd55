"""Member API routes."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_admin, get_current_user
from church_registry.common.db import get_db
from church_registry.common.models import Member
from church_registry.common.query import ListParams
from church_registry.common.schemas import Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.members import schemas
from church_registry.members.service import MemberService

router = APIRouter(prefix="/members", tags=["members"])


def to_response(member: Member, today: Optional[date] = None) -> schemas.MemberResponse:
    return schemas.MemberResponse(
        id=member.id,
        first_name=member.first_name,
        father_name=member.father_name,
        grandfather_name=member.grandfather_name,
        full_name=member.full_name,
        gender=member.gender,
        date_of_birth=member.date_of_birth,
        age=member.age_on(today or date.today()),
        christianity_name=member.christianity_name,
        education_level=member.education_level,
        role=member.role,
        live_status=member.live_status,
        phone=member.phone,
        emergency_phone=member.emergency_phone,
        parish=member.parish_id,
        mother_name=member.mother_name,
        mother_father_name=member.mother_father_name,
        soul_father_name=member.soul_father_name,
        photo_url=member.photo_url,
        death=member.death_id,
        created_at=member.created_at,
        updated_at=member.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.MemberResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_member(
    request: schemas.MemberCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    member = MemberService.create_member(db, current_user, request.model_dump())
    return Envelope(data=to_response(member), message="Member created successfully")


@router.get("", response_model=Envelope[schemas.MemberListData])
async def list_members(
    params: ListParams = Depends(),
    role: Optional[str] = Query(None),
    live_status: Optional[str] = Query(None, alias="liveStatus"),
    gender: Optional[str] = Query(None),
    parish: Optional[str] = Query(None, description="Parish id"),
    min_age: Optional[int] = Query(None, alias="minAge", ge=0),
    max_age: Optional[int] = Query(None, alias="maxAge", ge=0),
    search: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List members; wereda admins only see members of their own parishes."""
    today = date.today()
    members, pagination = MemberService.list_members(
        db,
        current_user,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        role=role,
        live_status=live_status,
        gender=gender,
        parish=parish,
        min_age=min_age,
        max_age=max_age,
        search=search,
        today=today,
    )
    return Envelope(
        data=schemas.MemberListData(
            members=[to_response(m, today) for m in members], pagination=pagination
        ),
        message="Members retrieved successfully",
    )


@router.get("/statistics", response_model=Envelope[schemas.MemberStatistics])
async def get_member_statistics(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stats = MemberService.get_statistics(db, current_user)
    return Envelope(
        data=schemas.MemberStatistics(**stats),
        message="Statistics retrieved successfully",
    )


@router.get("/{member_id}", response_model=Envelope[schemas.MemberResponse])
async def get_member(
    member_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    member = MemberService.get_member(db, current_user, member_id)
    return Envelope(data=to_response(member), message="Member retrieved successfully")


@router.api_route(
    "/{member_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.MemberResponse],
)
async def update_member(
    member_id: UUID,
    request: schemas.MemberUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    member = MemberService.update_member(
        db, current_user, member_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(data=to_response(member), message="Member updated successfully")


@router.delete("/{member_id}", response_model=Envelope[dict])
async def delete_member(
    member_id: UUID,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete a member and their records (admin only)."""
    MemberService.delete_member(db, current_user, member_id)
    return Envelope(data={}, message="Member deleted successfully")
