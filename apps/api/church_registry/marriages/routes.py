"""Marriage record API routes (admin only)."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from church_registry.auth.dependencies import get_current_admin
from church_registry.common.db import get_db
from church_registry.common.models import MarriageRecord
from church_registry.common.query import ListParams
from church_registry.common.schemas import Envelope
from church_registry.common.scope_validation import CurrentUser
from church_registry.marriages import schemas
from church_registry.marriages.service import MarriageService

router = APIRouter(prefix="/marriages", tags=["marriages"])


def to_response(marriage: MarriageRecord) -> schemas.MarriageResponse:
    return schemas.MarriageResponse(
        id=marriage.id,
        husband=marriage.husband_id,
        wife=marriage.wife_id,
        marriage_date=marriage.marriage_date,
        marriage_place=marriage.marriage_place,
        church=marriage.church_id,
        is_active=marriage.is_active,
        divorce_date=marriage.divorce_date,
        divorce_reason=marriage.divorce_reason,
        created_at=marriage.created_at,
        updated_at=marriage.updated_at,
    )


@router.post(
    "",
    response_model=Envelope[schemas.MarriageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_marriage(
    request: schemas.MarriageCreateRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    marriage = MarriageService.create_marriage(db, request.model_dump())
    return Envelope(
        data=to_response(marriage), message="Marriage record created successfully"
    )


@router.get("", response_model=Envelope[schemas.MarriageListData])
async def list_marriages(
    params: ListParams = Depends(),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    church: Optional[str] = Query(None, description="Parish id"),
    husband: Optional[str] = Query(None, description="Member id"),
    wife: Optional[str] = Query(None, description="Member id"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    marriages, pagination = MarriageService.list_marriages(
        db,
        page=params.page,
        limit=params.limit,
        sort=params.sort,
        is_active=is_active,
        church=church,
        husband=husband,
        wife=wife,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return Envelope(
        data=schemas.MarriageListData(
            marriages=[to_response(m) for m in marriages], pagination=pagination
        ),
        message="Marriage records retrieved successfully",
    )


@router.get("/{marriage_id}", response_model=Envelope[schemas.MarriageResponse])
async def get_marriage(
    marriage_id: UUID,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    marriage = MarriageService.get_marriage(db, marriage_id)
    return Envelope(
        data=to_response(marriage), message="Marriage record retrieved successfully"
    )


@router.api_route(
    "/{marriage_id}",
    methods=["PUT", "PATCH"],
    response_model=Envelope[schemas.MarriageResponse],
)
async def update_marriage(
    marriage_id: UUID,
    request: schemas.MarriageUpdateRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    marriage = MarriageService.update_marriage(
        db, marriage_id, request.model_dump(exclude_unset=True)
    )
    return Envelope(
        data=to_response(marriage), message="Marriage record updated successfully"
    )


@router.put("/{marriage_id}/divorce", response_model=Envelope[schemas.MarriageResponse])
async def divorce_marriage(
    marriage_id: UUID,
    request: schemas.DivorceRequest,
    current_user: CurrentUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Dissolve a marriage."""
    marriage = MarriageService.divorce(
        db, marriage_id, request.divorce_date, request.divorce_reason
    )
    return Envelope(
        data=to_response(marriage), message="Marriage marked as divorced successfully"
    )
