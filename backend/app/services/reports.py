"""
Report Service.

Read-only rollups of closed orders and cash movements.

Note: the payout sum is reported twice under different names, as the
masters' ``salary`` in the per-master report and as ``company_income`` in
the per-city report. Both are the same number (half of net).
"""

import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.ledger_enums import LedgerDirection
from backend.app.models.master import Master
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.schemas.report import MasterReportRow, CityReportRow, CashStats

logger = logging.getLogger("dispatch.reports")

UNKNOWN_CITY = "Unknown"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def date_window(
    date_from: Optional[date],
    date_to: Optional[date],
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Half-open datetime window ``[from, to + 1 day)`` for calendar dates.
    ``date_to`` is inclusive of the whole day.
    """
    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to + timedelta(days=1), time.min) if date_to else None
    return start, end


class ReportService:

    @staticmethod
    async def get_master_reports(
        db: AsyncSession,
        cities: Optional[List[str]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[MasterReportRow]:
        """
        Per-master rollup of DONE orders.

        ``cities`` keeps masters operating in at least one of the cities.
        The date window applies to ``closed_at``.
        """
        stmt = select(
            Order.master_id,
            func.count(Order.id).label("orders_count"),
            func.coalesce(func.sum(Order.settlement), 0).label("total_revenue"),
            func.coalesce(func.sum(Order.net), 0).label("clean_total"),
            func.coalesce(func.sum(Order.payout), 0).label("salary"),
        ).where(
            Order.status == OrderStatus.DONE,
            Order.master_id.is_not(None),
        ).group_by(Order.master_id)

        start, end = date_window(date_from, date_to)
        if start:
            stmt = stmt.where(Order.closed_at >= start)
        if end:
            stmt = stmt.where(Order.closed_at < end)

        rows = (await db.execute(stmt)).all()
        if not rows:
            return []

        masters_result = await db.execute(
            select(Master).where(Master.id.in_([row.master_id for row in rows]))
        )
        masters: Dict[int, Master] = {m.id: m for m in masters_result.scalars().all()}

        reports = []
        for row in rows:
            master = masters.get(row.master_id)
            if master is None:
                continue
            if cities is not None and not any(master.operates_in(city) for city in cities):
                continue
            revenue = float(row.total_revenue)
            reports.append(MasterReportRow(
                id=master.id,
                name=master.name,
                cities=list(master.cities or []),
                orders_count=row.orders_count,
                total_revenue=revenue,
                clean_total=float(row.clean_total),
                salary=float(row.salary),
                average_check=round_half_up(revenue / row.orders_count) if row.orders_count else 0,
            ))

        reports.sort(key=lambda r: r.orders_count, reverse=True)
        logger.info("Built %d master reports", len(reports))
        return reports

    @staticmethod
    async def get_cash_by_city(
        db: AsyncSession,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, CashStats]:
        """Income/expense/balance per ledger city over the window."""
        stmt = select(
            LedgerEntry.city,
            LedgerEntry.direction,
            func.coalesce(func.sum(LedgerEntry.amount), 0).label("total"),
            func.count(LedgerEntry.id).label("entries"),
        ).group_by(LedgerEntry.city, LedgerEntry.direction)

        start, end = date_window(date_from, date_to)
        if start:
            stmt = stmt.where(LedgerEntry.created_at >= start)
        if end:
            stmt = stmt.where(LedgerEntry.created_at < end)

        cash: Dict[str, CashStats] = {}
        for row in (await db.execute(stmt)).all():
            stats = cash.setdefault(row.city or UNKNOWN_CITY, CashStats())
            if row.direction == LedgerDirection.INCOME:
                stats.total_income += float(row.total)
                stats.income_count += row.entries
            elif row.direction == LedgerDirection.EXPENSE:
                stats.total_expenses += float(row.total)
                stats.expense_count += row.entries
            stats.net_income = stats.total_income - stats.total_expenses
        return cash

    @staticmethod
    async def get_city_reports(
        db: AsyncSession,
        cities: Optional[List[str]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[CityReportRow]:
        """
        Per-city rollup of DONE orders with a closing date, grouped by the
        order's own city, joined with the city's cash balance.
        """
        stmt = select(
            Order.city,
            func.count(Order.id).label("closed_orders"),
            func.coalesce(func.sum(Order.settlement), 0).label("total_revenue"),
            func.coalesce(func.sum(Order.payout), 0).label("company_income"),
        ).where(
            Order.status == OrderStatus.DONE,
            Order.closed_at.is_not(None),
        ).group_by(Order.city)

        if cities is not None:
            stmt = stmt.where(Order.city.in_(cities))

        start, end = date_window(date_from, date_to)
        if start:
            stmt = stmt.where(Order.closed_at >= start)
        if end:
            stmt = stmt.where(Order.closed_at < end)

        rows = (await db.execute(stmt)).all()
        cash = await ReportService.get_cash_by_city(db, date_from, date_to)

        reports = []
        for row in rows:
            revenue = float(row.total_revenue)
            city_cash = cash.get(row.city, CashStats())
            reports.append(CityReportRow(
                city=row.city,
                closed_orders=row.closed_orders,
                total_revenue=revenue,
                average_check=round_half_up(revenue / row.closed_orders) if row.closed_orders else 0,
                company_income=float(row.company_income),
                cash_income=city_cash.total_income,
                cash_expense=city_cash.total_expenses,
                cash_balance=city_cash.net_income,
            ))

        reports.sort(key=lambda r: r.closed_orders, reverse=True)
        logger.info("Built %d city reports", len(reports))
        return reports
