"""
Order Pydantic schemas.

Defines request and response models for the order queue and lifecycle.
Request models ignore unknown keys, so non-writable fields (``net``,
``payout``, ``closed_at``, ``id``...) are dropped before they reach the
service.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import LedgerPostStatus
from backend.app.models.order_enums import OrderStatus
from backend.app.schemas.master import MasterBrief


class OrderCreate(BaseModel):
    """Schema for order intake."""
    campaign: Optional[str] = Field(None, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    contact_name: Optional[str] = Field(None, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    client_name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    equipment_type: Optional[str] = Field(None, max_length=100)
    problem: str = Field(..., min_length=1)
    date_meeting: datetime = Field(..., description="Requested meeting time")
    order_type: Optional[str] = Field(None, max_length=50)
    master_id: Optional[int] = None
    settlement: Optional[float] = None
    expense: Optional[float] = None


class OrderUpdate(BaseModel):
    """Schema for a partial order update. Explicit null clears settlement/expense/master."""
    campaign: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    contact_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    order_type: Optional[str] = Field(None, max_length=50)
    client_name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    date_meeting: Optional[datetime] = None
    equipment_type: Optional[str] = Field(None, max_length=100)
    problem: Optional[str] = None
    status: Optional[OrderStatus] = None
    master_id: Optional[int] = None
    settlement: Optional[float] = None
    expense: Optional[float] = None
    receipt_doc: Optional[str] = Field(None, max_length=500)
    expense_doc: Optional[str] = Field(None, max_length=500)


class AssignMasterRequest(BaseModel):
    master_id: int = Field(..., gt=0)


class CloseOrderRequest(BaseModel):
    """Close shortcut. net/payout are derived server-side."""
    settlement: Optional[float] = None
    expense: Optional[float] = None


class OrderResponse(BaseModel):
    """Schema for order response."""
    id: int
    campaign: Optional[str]
    city: str
    contact_name: Optional[str]
    phone: str
    client_name: str
    address: str
    equipment_type: Optional[str]
    problem: str
    date_meeting: datetime
    order_type: Optional[str]
    master_id: Optional[int]
    master: Optional[MasterBrief]
    status: OrderStatus
    settlement: Optional[float]
    expense: Optional[float]
    net: Optional[float]
    payout: Optional[float]
    closed_at: Optional[datetime]
    receipt_doc: Optional[str]
    expense_doc: Optional[str]
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginationInfo(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderListResponse(BaseModel):
    """Ranked, paginated queue."""
    orders: List[OrderResponse]
    pagination: PaginationInfo


class LedgerPostResponse(BaseModel):
    """Outcome of the ledger half of an order mutation."""
    status: LedgerPostStatus
    entry_id: Optional[int] = None
    error: Optional[str] = None

    class Config:
        from_attributes = True


class OrderMutationResponse(BaseModel):
    message: str
    order: OrderResponse
    ledger: LedgerPostResponse


class FilterOptionsResponse(BaseModel):
    statuses: List[str]
    cities: List[str]
    masters: List[str]
