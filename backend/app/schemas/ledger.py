"""
Ledger (cash) Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import LedgerDirection
from backend.app.schemas.order import PaginationInfo
from backend.app.schemas.report import CashStats


class LedgerEntryResponse(BaseModel):
    """Schema for a ledger entry."""
    id: int
    direction: LedgerDirection
    amount: float
    city: Optional[str]
    memo: Optional[str]
    created_by: str
    payment_purpose: Optional[str]
    receipt_doc: Optional[str]
    created_at: datetime
    
    class Config:
        from_attributes = True


class LedgerEntryListResponse(BaseModel):
    """Paginated ledger entries, newest first."""
    operations: List[LedgerEntryResponse]
    pagination: PaginationInfo


class CashStatsResponse(BaseModel):
    stats: CashStats
