"""
Cash book API Endpoints.

Read access to ledger entries and their totals.
"""

import math
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import OrderValidationError
from backend.app.core.guards import require_back_office
from backend.app.db.session import get_db
from backend.app.models.ledger_enums import LedgerDirection
from backend.app.schemas.ledger import LedgerEntryResponse, LedgerEntryListResponse, CashStatsResponse
from backend.app.schemas.order import PaginationInfo
from backend.app.services.ledger import LedgerService

router = APIRouter(prefix="/cash", tags=["Cash"])


def _direction(value: Optional[str]) -> Optional[LedgerDirection]:
    if not value or value == "all":
        return None
    try:
        return LedgerDirection(value)
    except ValueError:
        raise OrderValidationError(f"Unknown operation type '{value}'", details={"field": "type"})


@router.get("", response_model=LedgerEntryListResponse)
async def list_cash_operations(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    type_filter: Optional[str] = Query(None, alias="type", description="income, expense or all"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None, description="Inclusive"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    entries, total = await LedgerService.list_entries(
        db, page, limit, _direction(type_filter), date_from, date_to
    )
    return LedgerEntryListResponse(
        operations=[LedgerEntryResponse.model_validate(e) for e in entries],
        pagination=PaginationInfo(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        )
    )


@router.get("/stats", response_model=CashStatsResponse)
async def get_cash_stats(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None, description="Inclusive"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Total income, expenses and their difference."""
    return CashStatsResponse(stats=await LedgerService.get_stats(db, date_from, date_to))


@router.get("/{entry_id}", response_model=LedgerEntryResponse)
async def get_cash_operation(
    entry_id: int = Path(..., description="Ledger entry ID"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    return LedgerEntryResponse.model_validate(await LedgerService.get_entry(db, entry_id))
