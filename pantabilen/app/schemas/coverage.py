"""
Coverage schemas.
"""

from pydantic import BaseModel
from typing import List, Optional


class RegionStatusResponse(BaseModel):
    region: str
    selected_count: int
    total_count: int
    is_full: bool
    is_partial: bool
    percentage: float


class CoverageChangeResponse(BaseModel):
    added_count: int
    removed_count: int
    added: List[int]
    removed: List[int]
    batches: int
    message: str
    region_status: Optional[RegionStatusResponse] = None


class CoverageResponse(BaseModel):
    tenant_id: int
    postal_code_ids: List[int]
    total: int
