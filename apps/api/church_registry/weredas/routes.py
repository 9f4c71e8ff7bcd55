"""Wereda unit API routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_admin, get_current_user
from church_registry.common.db import get_db
from church_registry.common.models import WeredaUnit
from church_registry.common.query import ListParams
from church_registry.common.schemas import Address, Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.weredas import schemas
from church_registry.weredas.service import WeredaService

router = APIRouter(prefix="/weredas", tags=["weredas"])


def to_response(wereda: WeredaUnit) -> schemas.WeredaResponse:
    return schemas.WeredaResponse(
        id=wereda.id,
        name=wereda.name,
        address=Address(
            region=wereda.region,
            zone=wereda.zone,
            woreda=wereda.woreda,
            kebele=wereda.kebele,
        ),
        created_at=wereda.created_at,
        updated_at=wereda.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.WeredaResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_wereda(
    request: schemas.WeredaCreateRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Create a wereda unit (admin only)."""
    wereda = WeredaService.create_wereda(
        db, name=request.name, address=request.address.model_dump()
    )
    return Envelope(data=to_response(wereda), message="WeredaUnit created successfully")


@router.get("", response_model=Envelope[schemas.WeredaListData])
async def list_weredas(
    params: ListParams = Depends(),
    name: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """List wereda units (admin only)."""
    weredas, pagination = WeredaService.list_weredas(
        db,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        name=name,
        region=region,
        search=search,
    )
    return Envelope(
        data=schemas.WeredaListData(
            weredas=[to_response(w) for w in weredas], pagination=pagination
        ),
        message="WeredaUnits retrieved successfully",
    )


@router.get("/{wereda_id}", response_model=Envelope[schemas.WeredaResponse])
async def get_wereda(
    wereda_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    wereda = WeredaService.get_wereda(db, current_user, wereda_id)
    return Envelope(data=to_response(wereda), message="WeredaUnit retrieved successfully")


@router.api_route(
    "/{wereda_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.WeredaResponse],
)
async def update_wereda(
    wereda_id: UUID,
    request: schemas.WeredaUpdateRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Partially update a wereda unit (admin only)."""
    wereda = WeredaService.update_wereda(
        db, wereda_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(data=to_response(wereda), message="WeredaUnit updated successfully")
