"""Parish API routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_user
from church_registry.common.db import get_db
from church_registry.common.models import Parish
from church_registry.common.query import ListParams
from church_registry.common.schemas import Address, Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.parishes import schemas
from church_registry.parishes.service import ParishService

router = APIRouter(prefix="/parishes", tags=["parishes"])


def to_response(parish: Parish) -> schemas.ParishResponse:
    return schemas.ParishResponse(
        id=parish.id,
        name=parish.name,
        address=Address(
            region=parish.region,
            zone=parish.zone,
            woreda=parish.woreda,
            kebele=parish.kebele,
        ),
        contact_person=schemas.ContactPerson(
            name=parish.contact_name,
            phone=parish.contact_phone,
            role=parish.contact_role,
        ),
        under=parish.under_id,
        created_at=parish.created_at,
        updated_at=parish.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.ParishResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_parish(
    request: schemas.ParishCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parish = ParishService.create_parish(db, current_user, request.model_dump())
    return Envelope(data=to_response(parish), message="Parish created successfully")


@router.get("", response_model=Envelope[schemas.ParishListData])
async def list_parishes(
    params: ListParams = Depends(),
    name: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    under: Optional[str] = Query(None, description="Wereda unit id"),
    search: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List parishes; wereda admins only see their own unit."""
    parishes, pagination = ParishService.list_parishes(
        db,
        current_user,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        name=name,
        region=region,
        under=under,
        search=search,
    )
    return Envelope(
        data=schemas.ParishListData(
            parishes=[to_response(p) for p in parishes], pagination=pagination
        ),
        message="Parishes retrieved successfully",
    )


@router.get(
    "/by-wereda/{wereda_id}",
    response_model=Envelope[schemas.ParishesByWeredaData],
)
async def list_parishes_by_wereda(
    wereda_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parishes = ParishService.list_by_wereda(db, current_user, wereda_id)
    return Envelope(
        data=schemas.ParishesByWeredaData(
            wereda=wereda_id,
            count=len(parishes),
            parishes=[to_response(p) for p in parishes],
        ),
        message="Parishes retrieved successfully",
    )


@router.get("/{parish_id}", response_model=Envelope[schemas.ParishResponse])
async def get_parish(
    parish_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parish = ParishService.get_parish(db, current_user, parish_id)
    return Envelope(data=to_response(parish), message="Parish retrieved successfully")


@router.api_route(
    "/{parish_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.ParishResponse],
)
async def update_parish(
    parish_id: UUID,
    request: schemas.ParishUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parish = ParishService.update_parish(
        db, current_user, parish_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(data=to_response(parish), message="Parish updated successfully")
