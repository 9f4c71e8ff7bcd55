"""Baptism record API routes."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_user
from church_registry.baptisms import schemas
from church_registry.baptisms.service import BaptismService
from church_registry.common.db import get_db
from church_registry.common.models import BaptismRecord
from church_registry.common.query import ListParams
from church_registry.common.schemas import Envelope
from church_registry.common.scope_validation import CurrentUser

router = APIRouter(prefix="/baptisms", tags=["baptisms"])


def to_response(baptism: BaptismRecord) -> schemas.BaptismResponse:
    return schemas.BaptismResponse(
        id=baptism.id,
        member=baptism.member_id,
        baptism_date=baptism.baptism_date,
        parish=baptism.parish_id,
        baptized_by=baptism.baptized_by_id,
        parent_contact=schemas.ParentContact(
            name=baptism.parent_name, phone=baptism.parent_phone
        ),
        created_at=baptism.created_at,
        updated_at=baptism.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.BaptismResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_baptism(
    request: schemas.BaptismCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    baptism = BaptismService.create_baptism(db, current_user, request.model_dump())
    return Envelope(
        data=to_response(baptism), message="Baptism record created successfully"
    )


@router.get("", response_model=Envelope[schemas.BaptismListData])
async def list_baptisms(
    params: ListParams = Depends(),
    member: Optional[str] = Query(None, description="Member id"),
    parish: Optional[str] = Query(None, description="Parish id"),
    baptized_by: Optional[str] = Query(None, alias="baptizedBy"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    baptisms, pagination = BaptismService.list_baptisms(
        db,
        current_user,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        member=member,
        parish=parish,
        baptized_by=baptized_by,
        start_date=start_date,
        end_date=end_date,
    )
    return Envelope(
        data=schemas.BaptismListData(
            baptisms=[to_response(b) for b in baptisms], pagination=pagination
        ),
        message="Baptism records retrieved successfully",
    )


@router.get("/{baptism_id}", response_model=Envelope[schemas.BaptismResponse])
async def get_baptism(
    baptism_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    baptism = BaptismService.get_baptism(db, current_user, baptism_id)
    return Envelope(
        data=to_response(baptism), message="Baptism record retrieved successfully"
    )


@router.api_route(
    "/{baptism_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.BaptismResponse],
)
async def update_baptism(
    baptism_id: UUID,
    request: schemas.BaptismUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    baptism = BaptismService.update_baptism(
        db, current_user, baptism_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(
        data=to_response(baptism), message="Baptism record updated successfully"
    )
