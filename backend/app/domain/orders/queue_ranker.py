"""
Queue Ranker.

Orders the live work queue: status priority first, then soonest meeting for
pending orders, newest first for everything else. Ranking happens in memory
over the fully materialized filtered set; pagination slices the ranked list.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from backend.app.models.order_enums import OrderStatus, STATUS_PRIORITY, UNKNOWN_STATUS_PRIORITY

T = TypeVar("T")


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


def _timestamp(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    return value.timestamp()


def queue_rank(status: Any) -> int:
    """Priority of a status; unknown statuses sort after every known one."""
    return STATUS_PRIORITY.get(_status_value(status), UNKNOWN_STATUS_PRIORITY)


def queue_sort_key(order: Any) -> Tuple[int, float]:
    """
    Sort key for one order.

    Equal ranks always share the same status (or are all unknown), so the
    tiebreak only depends on the order's own status.
    """
    rank = queue_rank(order.status)
    if _status_value(order.status) == OrderStatus.PENDING.value:
        return rank, _timestamp(order.date_meeting)
    return rank, -_timestamp(order.created_at)


@dataclass
class QueuePage(Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class InMemoryQueueRanker:
    """
    Ranks a materialized order set.

    Kept behind this class so a store-side rank column can replace it
    without touching callers.
    """

    def rank(self, orders: Iterable[T]) -> List[T]:
        return sorted(orders, key=queue_sort_key)

    def paginate(self, ranked: Sequence[T], page: int, limit: int) -> QueuePage[T]:
        offset = (page - 1) * limit
        return QueuePage(
            items=list(ranked[offset:offset + limit]),
            page=page,
            limit=limit,
            total=len(ranked),
        )

    def rank_page(self, orders: Iterable[T], page: int, limit: int) -> QueuePage[T]:
        return self.paginate(self.rank(orders), page, limit)


queue_ranker = InMemoryQueueRanker()
