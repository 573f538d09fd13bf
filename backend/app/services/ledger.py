"""
Ledger read service.

Listing and totals over the cash book. Entries are written only by the
ledger poster (or by manual entry tooling outside this service).
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import LedgerEntryNotFoundError
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.ledger_enums import LedgerDirection
from backend.app.schemas.report import CashStats
from backend.app.services.reports import date_window


def _window_conditions(date_from: Optional[date], date_to: Optional[date]) -> list:
    start, end = date_window(date_from, date_to)
    conditions = []
    if start:
        conditions.append(LedgerEntry.created_at >= start)
    if end:
        conditions.append(LedgerEntry.created_at < end)
    return conditions


class LedgerService:

    @staticmethod
    async def list_entries(
        db: AsyncSession,
        page: int,
        limit: int,
        direction: Optional[LedgerDirection] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Tuple[List[LedgerEntry], int]:
        """Paginated entries, newest first, with the unpaginated total."""
        conditions = _window_conditions(date_from, date_to)
        if direction is not None:
            conditions.append(LedgerEntry.direction == direction)

        total = (await db.execute(
            select(func.count(LedgerEntry.id)).where(*conditions)
        )).scalar() or 0

        offset = (page - 1) * limit
        result = await db.execute(
            select(LedgerEntry)
            .where(*conditions)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def get_entry(db: AsyncSession, entry_id: int) -> LedgerEntry:
        entry = await db.get(LedgerEntry, entry_id)
        if not entry:
            raise LedgerEntryNotFoundError(entry_id)
        return entry

    @staticmethod
    async def get_stats(
        db: AsyncSession,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> CashStats:
        """Income and expense totals over the window."""
        stmt = select(
            LedgerEntry.direction,
            func.coalesce(func.sum(LedgerEntry.amount), 0).label("total"),
            func.count(LedgerEntry.id).label("entries"),
        ).where(*_window_conditions(date_from, date_to)).group_by(LedgerEntry.direction)

        stats = CashStats()
        for row in (await db.execute(stmt)).all():
            if row.direction == LedgerDirection.INCOME:
                stats.total_income = float(row.total)
                stats.income_count = row.entries
            elif row.direction == LedgerDirection.EXPENSE:
                stats.total_expenses = float(row.total)
                stats.expense_count = row.entries
        stats.net_income = stats.total_income - stats.total_expenses
        return stats
