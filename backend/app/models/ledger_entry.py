"""
Ledger Entry database model.

Append-only cash movements (the "cash" book).
"""

from sqlalchemy import Column, Integer, Float, DateTime, Enum, String
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import LedgerDirection


class LedgerEntry(Base):
    """
    Ledger Entry model.
    
    Immutable record of a cash movement.
    An income entry posted for an order refers to it only through
    ``payment_purpose`` ("Order #<id>"); there is no foreign key back.
    NO updates or deletions by this service.
    """
    __tablename__ = "ledger_entries"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Entry details
    direction = Column(Enum(LedgerDirection), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    city = Column(String(100), nullable=True, index=True)
    memo = Column(String(500), nullable=True)
    created_by = Column(String(100), nullable=False)
    payment_purpose = Column(String(200), nullable=True)
    receipt_doc = Column(String(500), nullable=True)
    
    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<LedgerEntry(id={self.id}, direction='{self.direction.value}', amount={self.amount})>"
