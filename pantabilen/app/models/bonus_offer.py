"""
Bonus Offer database model.

Promotional bonuses with an inclusive date window.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.sql import func
from pantabilen.app.db.session import Base


class BonusOffer(Base):
    """
    Bonus Offer model.
    
    Active on every day of [start_date, end_date]. Deleting an offer only
    clears is_active. `conditions` is free-form JSON shown to admins and
    never evaluated automatically.
    """
    __tablename__ = "bonus_offers"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    
    bonus_name = Column(String(200), nullable=False)
    bonus_amount_sek = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    conditions = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<BonusOffer(id={self.id}, name='{self.bonus_name}', amount={self.bonus_amount_sek}, active={self.is_active})>"
