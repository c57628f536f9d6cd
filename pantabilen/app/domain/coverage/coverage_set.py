"""
Postal Code Coverage Set.

In-memory view of the postal codes one tenant services, plus the catalog
of postal codes per region used for region-level selection. Operations
return what changed so the caller can persist exactly that diff.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set


@dataclass(frozen=True)
class RegionStatus:
    """Selection progress of one region."""
    region: str
    selected_count: int
    total_count: int

    @property
    def is_full(self) -> bool:
        return self.total_count > 0 and self.selected_count == self.total_count

    @property
    def is_partial(self) -> bool:
        return 0 < self.selected_count < self.total_count

    @property
    def percentage(self) -> float:
        if self.total_count == 0:
            return 0.0
        return round(self.selected_count * 100 / self.total_count, 1)


class CoverageSet:
    """
    Set of (tenant_id, postal_code_id) pairs for a single tenant.

    Args:
        tenant_id: Tenant owning the selection
        selected: Postal code IDs currently selected
        catalog: Region name -> postal code IDs in that region
    """

    def __init__(self, tenant_id: int, selected: Iterable[int] = (), catalog: Optional[Dict[str, Iterable[int]]] = None):
        self.tenant_id = tenant_id
        self.selected: Set[int] = set(selected)
        self.catalog: Dict[str, Set[int]] = {
            region: set(ids) for region, ids in (catalog or {}).items()
        }

    def __contains__(self, postal_code_id: int) -> bool:
        return postal_code_id in self.selected

    def __len__(self) -> int:
        return len(self.selected)

    def pairs(self) -> Set[tuple]:
        return {(self.tenant_id, postal_code_id) for postal_code_id in self.selected}

    def toggle(self, postal_code_id: int) -> bool:
        """Select if absent, deselect if present. Returns True when now selected."""
        if postal_code_id in self.selected:
            self.selected.discard(postal_code_id)
            return False
        self.selected.add(postal_code_id)
        return True

    def region_codes(self, region: str) -> Set[int]:
        return self.catalog.get(region, set())

    def select_region(self, region: str) -> List[int]:
        """Select every code of `region`. Returns the newly selected IDs (empty if already full)."""
        added = sorted(self.region_codes(region) - self.selected)
        self.selected.update(added)
        return added

    def deselect_region(self, region: str) -> List[int]:
        """Deselect every code of `region`. Returns the removed IDs."""
        removed = sorted(self.region_codes(region) & self.selected)
        self.selected.difference_update(removed)
        return removed

    def clear(self) -> List[int]:
        removed = sorted(self.selected)
        self.selected.clear()
        return removed

    def region_status(self, region: str) -> RegionStatus:
        codes = self.region_codes(region)
        return RegionStatus(
            region=region,
            selected_count=len(codes & self.selected),
            total_count=len(codes),
        )

    def all_region_statuses(self) -> List[RegionStatus]:
        return [self.region_status(region) for region in sorted(self.catalog)]


def batched(items: List, batch_size: int) -> Iterable[List]:
    """Split `items` into lists of at most `batch_size` elements."""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    for start in range(0, len(items), batch_size):
        yield items[start:start + batch_size]
