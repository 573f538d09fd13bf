"""
Order Service (Domain Logic).

Owns every write to an order: intake, field updates, master assignment and
the close shortcut all go through ``_apply_update``.

Update flow:
1. Load the order (OrderNotFound)
2. City scope check
3. Terminal immutability (TerminalOrderImmutable)
4. Payload whitelist (ValidationError)
5. Transition policy (InvalidTransition)
6. Derive net/payout, stamp closed_at
7. Compare-and-swap write on ``version`` (ConcurrentOrderUpdate)
8. Best-effort ledger post
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    CityAccessDeniedError,
    ConcurrentOrderUpdateError,
    MasterNotFoundError,
    OrderNotFoundError,
    OrderValidationError,
)
from backend.app.domain.ledger.ledger_poster import LedgerPoster, LedgerPostResult, LedgerPostStatus
from backend.app.domain.orders.financials import apply_derived_fields
from backend.app.domain.orders.queue_ranker import QueuePage, queue_ranker
from backend.app.domain.orders.state_machine import (
    check_transition,
    closing_timestamp,
    ensure_mutable,
    sanitize_changes,
)
from backend.app.models.master import Master
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from backend.app.services.cache import CacheService, FILTER_OPTIONS_KEY

logger = logging.getLogger("dispatch.orders")

LEADING_ID = re.compile(r"\s*\+?(\d+)")
MAX_ORDER_ID = 2**31 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OrderQueueFilters:
    """Queue filters; the literal ``all`` disables a filter."""
    status: Optional[str] = None
    city: Optional[str] = None
    master: Optional[str] = None
    search: Optional[str] = None
    cities: Optional[List[str]] = None  # principal scope, None = unscoped


@dataclass
class OrderUpdateOutcome:
    """Order write and ledger post are independent; both results are reported."""
    order: Order
    ledger: LedgerPostResult = field(default_factory=LedgerPostResult.skipped)


def leading_order_id(search: str) -> Optional[int]:
    """
    Order id from the leading digits of a search term ('123-45' -> 123).

    Numbers past the id column range (phone numbers) give None.
    """
    match = LEADING_ID.match(search)
    if not match:
        return None
    order_id = int(match.group(1))
    return order_id if order_id <= MAX_ORDER_ID else None


def _active(value: Optional[str]) -> bool:
    return bool(value) and value != "all"


def _enforce_scope(city: Optional[str], allowed_cities: Optional[List[str]]) -> None:
    if allowed_cities is not None and city not in allowed_cities:
        raise CityAccessDeniedError(city or "")


class OrderService:

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        """Load an order with its master, refreshing any stale identity-map copy."""
        result = await db.execute(
            select(Order)
            .options(selectinload(Order.master))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    async def _ensure_master(db: AsyncSession, master_id: Optional[int]) -> None:
        if master_id is None:
            return
        if await db.get(Master, master_id) is None:
            raise MasterNotFoundError(master_id)

    @staticmethod
    async def create_order(
        db: AsyncSession,
        data: Dict[str, Any],
        allowed_cities: Optional[List[str]] = None,
    ) -> Order:
        """Intake: create a PENDING order from validated intake fields."""
        _enforce_scope(data.get("city"), allowed_cities)
        await OrderService._ensure_master(db, data.get("master_id"))

        values = apply_derived_fields(dict(data))
        new_order = Order(**values, status=OrderStatus.PENDING, version=1)

        db.add(new_order)
        await db.commit()

        logger.info("Order %s created in %s", new_order.id, new_order.city, extra={"order_id": new_order.id})
        await CacheService.invalidate(FILTER_OPTIONS_KEY)
        return await OrderService.get_order(db, new_order.id)

    @staticmethod
    async def list_queue(
        db: AsyncSession,
        filters: OrderQueueFilters,
        page: int,
        limit: int,
    ) -> QueuePage:
        """
        Fetch the whole filtered set, rank it in memory, then slice the page.
        """
        query = select(Order).options(selectinload(Order.master))

        if _active(filters.status):
            try:
                status = OrderStatus(filters.status)
            except ValueError:
                raise OrderValidationError(
                    f"Unknown order status '{filters.status}'",
                    details={"field": "status"}
                )
            query = query.where(Order.status == status)
        if _active(filters.city):
            query = query.where(Order.city == filters.city)
        if filters.cities is not None:
            query = query.where(Order.city.in_(filters.cities))
        if _active(filters.master):
            query = query.where(Order.master.has(Master.name == filters.master))
        if filters.search:
            conditions = [
                Order.phone.contains(filters.search),
                Order.address.contains(filters.search),
            ]
            order_id = leading_order_id(filters.search)
            if order_id is not None:
                conditions.append(Order.id == order_id)
            query = query.where(or_(*conditions))

        result = await db.execute(query)
        orders = result.scalars().all()

        return queue_ranker.rank_page(orders, page, limit)

    @staticmethod
    async def filter_options(db: AsyncSession, allowed_cities: Optional[List[str]] = None) -> Dict[str, List[str]]:
        """Distinct statuses and cities of orders, names of active masters."""
        options = await CacheService.get(FILTER_OPTIONS_KEY)
        if options is None:
            statuses = (await db.execute(select(Order.status).distinct())).scalars().all()
            cities = (await db.execute(select(Order.city).distinct())).scalars().all()
            masters = (await db.execute(
                select(Master.name).where(Master.is_active == True).order_by(Master.name)
            )).scalars().all()
            options = {
                "statuses": sorted(s.value for s in statuses if s),
                "cities": sorted(c for c in cities if c),
                "masters": [m for m in masters if m],
            }
            await CacheService.set(FILTER_OPTIONS_KEY, options, ttl_seconds=settings.filter_options_cache_ttl)

        if allowed_cities is not None:
            options = {**options, "cities": [c for c in options["cities"] if c in allowed_cities]}
        return options

    @staticmethod
    async def update_order(
        db: AsyncSession,
        order_id: int,
        payload: Dict[str, Any],
        allowed_cities: Optional[List[str]] = None,
    ) -> OrderUpdateOutcome:
        """Apply a whitelisted partial update."""
        return await OrderService._apply_update(db, order_id, payload, allowed_cities)

    @staticmethod
    async def assign_master(
        db: AsyncSession,
        order_id: int,
        master_id: int,
        allowed_cities: Optional[List[str]] = None,
    ) -> OrderUpdateOutcome:
        """Restricted update touching only the master reference."""
        return await OrderService._apply_update(db, order_id, {"master_id": master_id}, allowed_cities)

    @staticmethod
    async def close_order(
        db: AsyncSession,
        order_id: int,
        settlement: Optional[float],
        expense: Optional[float],
        allowed_cities: Optional[List[str]] = None,
    ) -> OrderUpdateOutcome:
        """Force DONE with the reported financials."""
        payload: Dict[str, Any] = {"status": OrderStatus.DONE}
        if settlement is not None:
            payload["settlement"] = settlement
        if expense is not None:
            payload["expense"] = expense
        return await OrderService._apply_update(db, order_id, payload, allowed_cities)

    @staticmethod
    async def _apply_update(
        db: AsyncSession,
        order_id: int,
        payload: Dict[str, Any],
        allowed_cities: Optional[List[str]],
    ) -> OrderUpdateOutcome:
        order = await OrderService.get_order(db, order_id)
        _enforce_scope(order.city, allowed_cities)
        ensure_mutable(order.id, order.status)

        changes = sanitize_changes(payload)
        if "city" in changes:
            _enforce_scope(changes["city"], allowed_cities)

        previous_status = order.status
        read_version = order.version
        target_status = changes.get("status")

        if target_status is not None:
            check_transition(previous_status, target_status)
        if "master_id" in changes:
            await OrderService._ensure_master(db, changes["master_id"])

        apply_derived_fields(changes, order)
        closed_at = closing_timestamp(order.closed_at, target_status, utcnow())
        if closed_at is not None:
            changes["closed_at"] = closed_at

        stmt = update(Order).where(Order.id == order.id)
        if settings.enforce_order_version:
            stmt = stmt.where(Order.version == read_version)
        stmt = stmt.values(**changes, version=Order.version + 1).execution_options(synchronize_session=False)

        try:
            result = await db.execute(stmt)
            if result.rowcount == 0:
                raise ConcurrentOrderUpdateError(order.id, read_version)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        order = await OrderService.get_order(db, order_id)
        logger.info(
            "Order %s updated (%s)", order.id, ", ".join(sorted(changes)),
            extra={"order_id": order.id, "from_status": previous_status.value, "to_status": order.status.value}
        )
        await CacheService.invalidate(FILTER_OPTIONS_KEY)

        ledger = LedgerPostResult.skipped()
        if LedgerPoster.should_post(previous_status, target_status, order.settlement):
            master_name = order.master.name if order.master else None
            ledger = await LedgerPoster.post_income(db, order, master_name)
            if ledger.status == LedgerPostStatus.FAILED:
                order = await OrderService.get_order(db, order_id)

        return OrderUpdateOutcome(order=order, ledger=ledger)
