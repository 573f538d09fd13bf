"""
Master directory API Endpoints (read-only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.guards import require_back_office
from backend.app.db.session import get_db
from backend.app.schemas.master import MasterResponse, MasterListResponse, MasterDetailResponse
from backend.app.services.master_directory import MasterDirectory

router = APIRouter(prefix="/masters", tags=["Masters"])


@router.get("", response_model=MasterListResponse)
async def list_masters(
    city: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    masters = await MasterDirectory.list_masters(db, city=city, active=active)
    return MasterListResponse(
        masters=[MasterResponse.model_validate(m) for m in masters],
        total=len(masters)
    )


@router.get("/{master_id}", response_model=MasterDetailResponse)
async def get_master(
    master_id: int = Path(..., description="Master ID"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Master card with order history."""
    master = await MasterDirectory.get_master(db, master_id, with_orders=True)
    return MasterDetailResponse.model_validate(master)
