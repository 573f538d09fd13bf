"""
Report API Endpoints.

Read-only rollups over closed orders and the cash book.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.guards import require_back_office, CityScopeGuard
from backend.app.core.exceptions import OrderValidationError
from backend.app.db.session import get_db
from backend.app.schemas.report import MasterReportRow, CityReportRow
from backend.app.services.reports import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])
city_guard = CityScopeGuard()


def _check_window(date_from: Optional[date], date_to: Optional[date]):
    if date_from and date_to and date_from > date_to:
        raise OrderValidationError(
            "date_from must not be after date_to",
            details={"date_from": str(date_from), "date_to": str(date_to)}
        )


@router.get("/masters", response_model=List[MasterReportRow])
async def get_master_reports(
    city: Optional[str] = Query(None, description="Only masters operating in this city"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None, description="Inclusive"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Orders, revenue, net, salary and average check per master."""
    _check_window(date_from, date_to)
    cities = city_guard.clamp(city, current_user)
    return await ReportService.get_master_reports(db, cities, date_from, date_to)


@router.get("/city", response_model=List[CityReportRow])
async def get_city_reports(
    city: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None, description="Closing date from"),
    date_to: Optional[date] = Query(None, description="Closing date to, inclusive"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Closed orders, revenue, company income and cash balance per city."""
    _check_window(date_from, date_to)
    cities = city_guard.clamp(city, current_user)
    return await ReportService.get_city_reports(db, cities, date_from, date_to)
