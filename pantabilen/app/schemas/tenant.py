"""
Tenant schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    country: str = Field("Sweden", min_length=1, max_length=100)
    base_address: Optional[str] = Field(None, max_length=500)


class TenantResponse(BaseModel):
    id: int
    name: str
    country: str
    base_address: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
