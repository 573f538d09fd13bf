"""
Master directory (read-only).

Lookups of field technicians for assignment, ledger memos and reports.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.core.exceptions import MasterNotFoundError
from backend.app.models.master import Master


class MasterDirectory:

    @staticmethod
    async def list_masters(
        db: AsyncSession,
        city: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> List[Master]:
        query = select(Master).order_by(Master.created_at.desc(), Master.id.desc())
        if active is not None:
            query = query.where(Master.is_active == active)
        masters = (await db.execute(query)).scalars().all()
        # cities is a JSON list; filter here to stay portable across backends
        if city and city != "all":
            masters = [m for m in masters if m.operates_in(city)]
        return list(masters)

    @staticmethod
    async def get_master(db: AsyncSession, master_id: int, with_orders: bool = False) -> Master:
        query = select(Master).where(Master.id == master_id)
        if with_orders:
            query = query.options(selectinload(Master.orders))
        master = (await db.execute(query)).scalar_one_or_none()
        if not master:
            raise MasterNotFoundError(master_id)
        return master
