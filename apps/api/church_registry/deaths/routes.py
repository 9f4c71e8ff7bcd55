"""Death record API routes."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_user
from church_registry.common.db import get_db
from church_registry.common.models import DeathRecord
from church_registry.common.query import ListParams
from church_registry.common.schemas import Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.deaths import schemas
from church_registry.deaths.service import DeathService

router = APIRouter(prefix="/deaths", tags=["deaths"])


def to_response(death: DeathRecord) -> schemas.DeathResponse:
    return schemas.DeathResponse(
        id=death.id,
        member=death.member_id,
        date_of_death=death.date_of_death,
        grave_location=death.grave_location_id,
        created_at=death.created_at,
        updated_at=death.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.DeathResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_death(
    request: schemas.DeathCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record a death; the member is marked Deceased."""
    death = DeathService.create_death(db, current_user, request.model_dump())
    return Envelope(data=to_response(death), message="Death record created successfully")


@router.get("", response_model=Envelope[schemas.DeathListData])
async def list_deaths(
    params: ListParams = Depends(),
    member: Optional[str] = Query(None, description="Member id"),
    grave_location: Optional[str] = Query(None, alias="graveLocation"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deaths, pagination = DeathService.list_deaths(
        db,
        current_user,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        member=member,
        grave_location=grave_location,
        start_date=start_date,
        end_date=end_date,
    )
    return Envelope(
        data=schemas.DeathListData(
            deaths=[to_response(d) for d in deaths], pagination=pagination
        ),
        message="Death records retrieved successfully",
    )


@router.get("/{death_id}", response_model=Envelope[schemas.DeathResponse])
async def get_death(
    death_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    death = DeathService.get_death(db, current_user, death_id)
    return Envelope(
        data=to_response(death), message="Death record retrieved successfully"
    )


@router.api_route(
    "/{death_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.DeathResponse],
)
async def update_death(
    death_id: UUID,
    request: schemas.DeathUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    death = DeathService.update_death(
        db, current_user, death_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(data=to_response(death), message="Death record updated successfully")


@router.delete("/{death_id}", response_model=Envelope[dict])
async def delete_death(
    death_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a death record; the member returns to Active."""
    DeathService.delete_death(db, current_user, death_id)
    return Envelope(data={}, message="Death record deleted successfully")
