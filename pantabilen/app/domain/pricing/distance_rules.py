"""
Distance Rule Validator.

Checks tenant distance rules before they are persisted. A rule covers the
half-open interval [min_distance_km, max_distance_km); a missing max means
the rule is unbounded. Rules of one tenant must not overlap.

Works on any object exposing `id`, `tenant_id`, `min_distance_km`,
`max_distance_km` and `deduction_sek` (ORM rows or `RuleCandidate`).
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from pantabilen.app.core.exceptions import ConflictError, RangeError


@dataclass(frozen=True)
class RuleCandidate:
    """A distance rule that is about to be created or edited."""
    tenant_id: int
    min_distance_km: float
    max_distance_km: Optional[float]
    deduction_sek: int
    id: Optional[int] = None


def upper_bound(rule: Any) -> float:
    """Upper end of the rule's interval, +inf when unbounded."""
    return math.inf if rule.max_distance_km is None else rule.max_distance_km


def intervals_overlap(a: Any, b: Any) -> bool:
    """[a1, b1) and [a2, b2) intersect iff a1 < b2 and a2 < b1."""
    return a.min_distance_km < upper_bound(b) and b.min_distance_km < upper_bound(a)


def validate_distance_rule(
    candidate: Any,
    existing_rules: Iterable[Any],
    exclude_id: Optional[int] = None,
) -> None:
    """
    Validate a new or edited distance rule.

    Args:
        candidate: Rule to validate
        existing_rules: Rules already stored (any tenant; others are ignored)
        exclude_id: ID of the rule being edited, skipped in the overlap check

    Raises:
        RangeError: negative min, max <= min, or positive deduction
        ConflictError: interval overlaps another rule of the same tenant
    """
    if candidate.min_distance_km < 0:
        raise RangeError(
            "Minsta avstånd kan inte vara negativt",
            details={"min_distance_km": candidate.min_distance_km},
        )
    if candidate.max_distance_km is not None and candidate.max_distance_km <= candidate.min_distance_km:
        raise RangeError(
            "Maximalt avstånd måste vara större än minsta avstånd",
            details={
                "min_distance_km": candidate.min_distance_km,
                "max_distance_km": candidate.max_distance_km,
            },
        )
    if candidate.deduction_sek > 0:
        raise RangeError(
            "Avdrag måste vara negativt eller noll",
            details={"deduction_sek": candidate.deduction_sek},
        )

    for rule in existing_rules:
        if rule.tenant_id != candidate.tenant_id:
            continue
        if exclude_id is not None and rule.id == exclude_id:
            continue
        if intervals_overlap(candidate, rule):
            raise ConflictError(
                "Denna regel överlappar med en befintlig regel",
                details={
                    "conflicting_rule_id": rule.id,
                    "conflicting_range": format_distance_range(rule),
                },
            )


def find_matching_rule(rules: Sequence[Any], distance_km: float) -> Optional[Any]:
    """First rule (by ascending min distance) whose interval contains `distance_km`."""
    for rule in sorted(rules, key=lambda r: r.min_distance_km):
        if rule.min_distance_km <= distance_km < upper_bound(rule):
            return rule
    return None


def _km(value: float) -> str:
    return f"{value:g}"


def format_distance_range(rule: Any) -> str:
    """Human-readable range, e.g. '20-50 km' or '50+ km'."""
    if rule.max_distance_km is None:
        return f"{_km(rule.min_distance_km)}+ km"
    return f"{_km(rule.min_distance_km)}-{_km(rule.max_distance_km)} km"
