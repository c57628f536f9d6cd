"""
Tenant database model.

A tenant is an independent scrapyard business on the shared platform.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class Tenant(Base):
    """Tenant (scrapyard) model."""
    __tablename__ = "tenants"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    country = Column(String(100), nullable=False, default="Sweden")
    base_address = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}', country='{self.country}')>"
