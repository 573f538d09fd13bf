"""
Unit tests for queue ranking and pagination.
"""

from datetime import datetime, timedelta
from types import SimpleNamespace

from backend.app.domain.orders.queue_ranker import InMemoryQueueRanker, queue_rank
from backend.app.models.order_enums import OrderStatus

T0 = datetime(2026, 10, 1, 9, 0)


def _order(oid, status, created_offset=0, meeting_offset=0):
    return SimpleNamespace(
        id=oid,
        status=status,
        created_at=T0 + timedelta(hours=created_offset),
        date_meeting=T0 + timedelta(days=1, hours=meeting_offset),
    )


def test_rank_table():
    assert [queue_rank(s) for s in OrderStatus] == [1, 2, 3, 4, 5, 6, 7]
    assert queue_rank("Archived") > queue_rank(OrderStatus.NOT_ORDERED)
    assert queue_rank("Pending") == 1


def test_mixed_statuses_rank_total_order():
    orders = [
        _order(1, OrderStatus.DONE, created_offset=1),
        _order(2, OrderStatus.PENDING, created_offset=5, meeting_offset=8),
        _order(3, OrderStatus.PENDING, created_offset=0, meeting_offset=2),
        _order(4, OrderStatus.REFUSED, created_offset=9),
        _order(5, OrderStatus.IN_PROGRESS, created_offset=3),
    ]
    ranked = InMemoryQueueRanker().rank(orders)
    assert [o.id for o in ranked] == [3, 2, 5, 1, 4]


def test_same_status_non_pending_newest_first():
    orders = [
        _order(1, OrderStatus.ACCEPTED, created_offset=1),
        _order(2, OrderStatus.ACCEPTED, created_offset=3),
        _order(3, OrderStatus.ACCEPTED, created_offset=2),
    ]
    assert [o.id for o in InMemoryQueueRanker().rank(orders)] == [2, 3, 1]


def test_unknown_status_sorts_last():
    orders = [
        _order(1, "Archived", created_offset=9),
        _order(2, OrderStatus.NOT_ORDERED),
    ]
    assert [o.id for o in InMemoryQueueRanker().rank(orders)] == [2, 1]


def test_pagination_slices_ranked_sequence():
    ranker = InMemoryQueueRanker()
    orders = [
        _order(1, OrderStatus.DONE, created_offset=1),
        _order(2, OrderStatus.PENDING, meeting_offset=8),
        _order(3, OrderStatus.PENDING, meeting_offset=2),
        _order(4, OrderStatus.REFUSED, created_offset=9),
        _order(5, OrderStatus.IN_PROGRESS),
    ]
    page = ranker.rank_page(orders, page=2, limit=2)
    assert [o.id for o in page.items] == [5, 1]
    assert page.total == 5
    assert page.pages == 3

    last = ranker.rank_page(orders, page=3, limit=2)
    assert [o.id for o in last.items] == [4]

    beyond = ranker.rank_page(orders, page=4, limit=2)
    assert beyond.items == []
