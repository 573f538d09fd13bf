"""
Order database model.

One unit of dispatched repair work, tracked from intake to financial close.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.order_enums import OrderStatus, TERMINAL_STATUSES


class Order(Base):
    """
    Order model.

    Created by intake with status PENDING and mutated only through the
    order service. Once the status is terminal the row is read-only.
    ``net`` and ``payout`` are derived from ``settlement``/``expense``.
    ``version`` is bumped by every update (compare-and-swap guard).
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Intake
    campaign = Column(String(100), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    contact_name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=False, index=True)
    client_name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=False)
    equipment_type = Column(String(100), nullable=True)
    problem = Column(Text, nullable=False)
    date_meeting = Column(DateTime(timezone=True), nullable=False)
    order_type = Column(String(50), nullable=True)

    # Assignment
    master_id = Column(Integer, ForeignKey('masters.id'), nullable=True, index=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)

    # Financials (net/payout are derived)
    settlement = Column(Float, nullable=True)
    expense = Column(Float, nullable=True)
    net = Column(Float, nullable=True)
    payout = Column(Float, nullable=True)

    # Set once, on the first move into a terminal status
    closed_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Opaque document identifiers
    receipt_doc = Column(String(500), nullable=True)
    expense_doc = Column(String(500), nullable=True)

    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    master = relationship("Master", back_populates="orders")

    @property
    def is_closed(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self):
        return f"<Order(id={self.id}, city='{self.city}', status='{self.status.value}')>"
