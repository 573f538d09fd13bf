"""
Ledger Poster (Domain Logic).

Posts one income entry when an order is closed as DONE with a positive
settlement. Posting runs after the order write and in its own transaction:
a failure is logged and reported back, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.ledger_enums import LedgerDirection, LedgerPostStatus
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus

logger = logging.getLogger("dispatch.ledger")


@dataclass
class LedgerPostResult:
    status: LedgerPostStatus
    entry_id: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def skipped(cls) -> "LedgerPostResult":
        return cls(status=LedgerPostStatus.SKIPPED)


def payment_purpose_for(order_id: int) -> str:
    return f"Order #{order_id}"


def format_amount(amount: float) -> str:
    """Amount as written in memos: cents kept, trailing zeros dropped, never exponent notation."""
    return f"{amount:.2f}".rstrip("0").rstrip(".")


class LedgerPoster:

    @staticmethod
    def should_post(
        previous_status: OrderStatus,
        requested_status: Optional[OrderStatus],
        settlement: Optional[float],
    ) -> bool:
        """
        Trigger check, evaluated against the status read at request start.

        1. the update sets status to DONE
        2. the order was not DONE before
        3. the resulting settlement is present and > 0
        """
        if requested_status != OrderStatus.DONE:
            return False
        if previous_status == OrderStatus.DONE:
            return False
        return settlement is not None and float(settlement) > 0

    @staticmethod
    def build_entry(order: Order, master_name: Optional[str]) -> LedgerEntry:
        """Income entry for a closed order."""
        name = master_name or settings.ledger_unassigned_master
        return LedgerEntry(
            direction=LedgerDirection.INCOME,
            amount=float(order.settlement),
            city=order.city,
            memo=f"{name} - order total: {format_amount(float(order.settlement))}",
            created_by=settings.ledger_system_creator,
            payment_purpose=payment_purpose_for(order.id),
        )

    @staticmethod
    async def post_income(
        db: AsyncSession,
        order: Order,
        master_name: Optional[str],
    ) -> LedgerPostResult:
        """
        Write the income entry in its own commit.

        Returns:
            POSTED with the new entry id, or FAILED with the error text.
            The order write that preceded this call is never rolled back.
        """
        order_id, city, settlement = order.id, order.city, order.settlement
        try:
            entry = LedgerPoster.build_entry(order, master_name)
            db.add(entry)
            await db.commit()
        except Exception as exc:
            # rollback expires every instance in the session, order included
            await db.rollback()
            logger.error(
                "Ledger post failed for order %s (settlement %s)", order_id, settlement,
                exc_info=exc,
                extra={"order_id": order_id, "city": city}
            )
            return LedgerPostResult(status=LedgerPostStatus.FAILED, error=type(exc).__name__)

        logger.info(
            "Posted income %s for order %s (master: %s)",
            entry.amount, order_id, master_name or settings.ledger_unassigned_master,
            extra={"order_id": order_id, "ledger_entry_id": entry.id}
        )
        return LedgerPostResult(status=LedgerPostStatus.POSTED, entry_id=entry.id)
