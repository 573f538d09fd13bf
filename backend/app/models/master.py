"""
Master database model.

Masters are field technicians. They are owned by the master directory;
this service only reads them.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Master(Base):
    """
    Master (field technician) model.

    ``cities`` is the list of cities the master operates in.
    """
    __tablename__ = "masters"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    cities = Column(JSON, nullable=False, default=list)
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    orders = relationship("Order", back_populates="master")
    
    def operates_in(self, city: str) -> bool:
        return city in (self.cities or [])
    
    def __repr__(self):
        return f"<Master(id={self.id}, name='{self.name}', active={self.is_active})>"
