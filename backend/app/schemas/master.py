"""
Master directory Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from backend.app.models.order_enums import OrderStatus


class MasterBrief(BaseModel):
    """Master summary embedded in order responses."""
    id: int
    name: str
    cities: List[str]
    
    class Config:
        from_attributes = True


class MasterResponse(MasterBrief):
    phone: Optional[str]
    is_active: bool
    created_at: datetime


class MasterOrderHistoryItem(BaseModel):
    id: int
    status: OrderStatus
    city: str
    settlement: Optional[float]
    date_meeting: datetime
    closed_at: Optional[datetime]
    
    class Config:
        from_attributes = True


class MasterDetailResponse(MasterResponse):
    orders: List[MasterOrderHistoryItem]


class MasterListResponse(BaseModel):
    masters: List[MasterResponse]
    total: int
