"""
Order API Endpoints.

Live queue, intake, field updates, master assignment and the close shortcut.
Every mutation returns the order together with the ledger posting outcome.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.guards import require_back_office, CityScopeGuard
from backend.app.db.session import get_db
from backend.app.domain.orders.order_service import OrderService, OrderQueueFilters, OrderUpdateOutcome
from backend.app.schemas.order import (
    OrderCreate, OrderUpdate, AssignMasterRequest, CloseOrderRequest,
    OrderResponse, OrderListResponse, OrderMutationResponse,
    PaginationInfo, LedgerPostResponse, FilterOptionsResponse,
)

router = APIRouter(prefix="/orders", tags=["Orders"])
city_guard = CityScopeGuard()


def _mutation_response(message: str, outcome: OrderUpdateOutcome) -> OrderMutationResponse:
    return OrderMutationResponse(
        message=message,
        order=OrderResponse.model_validate(outcome.order),
        ledger=LedgerPostResponse.model_validate(outcome.ledger),
    )


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"),
    status_filter: Optional[str] = Query(None, alias="status"),
    city: Optional[str] = Query(None),
    master: Optional[str] = Query(None, description="Assigned master name"),
    search: Optional[str] = Query(None, description="Phone, address or order id"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """
    Ranked work queue.

    The whole filtered set is ranked (status priority, then meeting time for
    pending orders, newest first otherwise) before the page is cut.
    """
    filters = OrderQueueFilters(
        status=status_filter,
        city=city,
        master=master,
        search=search,
        cities=city_guard.allowed_cities(current_user),
    )
    queue_page = await OrderService.list_queue(db, filters, page, limit)

    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in queue_page.items],
        pagination=PaginationInfo(
            page=queue_page.page,
            limit=queue_page.limit,
            total=queue_page.total,
            pages=queue_page.pages,
        )
    )


@router.get("/filter-options", response_model=FilterOptionsResponse)
async def get_filter_options(
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Statuses, cities and active master names for the queue filters."""
    return await OrderService.filter_options(db, city_guard.allowed_cities(current_user))


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Order intake. New orders start as Pending."""
    order = await OrderService.create_order(
        db,
        order_data.model_dump(exclude_unset=True),
        allowed_cities=city_guard.allowed_cities(current_user),
    )
    return OrderResponse.model_validate(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int = Path(..., description="Order ID"),
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService.get_order(db, order_id)
    city_guard.enforce(order.city, current_user)
    return OrderResponse.model_validate(order)


@router.put("/{order_id}", response_model=OrderMutationResponse)
async def update_order(
    order_id: int = Path(..., description="Order ID"),
    order_data: OrderUpdate = ...,
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """
    Update order fields.

    Closed orders (Done, Refused, NotOrdered) are read-only. Moving to Done
    with a positive settlement posts an income entry to the cash book.
    """
    outcome = await OrderService.update_order(
        db,
        order_id,
        order_data.model_dump(exclude_unset=True),
        allowed_cities=city_guard.allowed_cities(current_user),
    )
    return _mutation_response("Order updated", outcome)


@router.post("/{order_id}/assign-master", response_model=OrderMutationResponse)
async def assign_master(
    order_id: int = Path(..., description="Order ID"),
    request: AssignMasterRequest = ...,
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    outcome = await OrderService.assign_master(
        db,
        order_id,
        request.master_id,
        allowed_cities=city_guard.allowed_cities(current_user),
    )
    return _mutation_response("Master assigned", outcome)


@router.post("/{order_id}/close", response_model=OrderMutationResponse)
async def close_order(
    order_id: int = Path(..., description="Order ID"),
    request: CloseOrderRequest = ...,
    current_user: dict = Depends(require_back_office),
    db: AsyncSession = Depends(get_db)
):
    """Mark the order Done with its final settlement and expense."""
    outcome = await OrderService.close_order(
        db,
        order_id,
        settlement=request.settlement,
        expense=request.expense,
        allowed_cities=city_guard.allowed_cities(current_user),
    )
    return _mutation_response("Order closed", outcome)
