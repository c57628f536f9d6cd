"""
Bonus Offer Matcher.

Selects promotional offers whose inclusive date window contains a date.
Offer `conditions` are informational only and are not evaluated here.
"""

from datetime import date, datetime
from typing import Any, List, Optional, Sequence


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_offer_active(offer: Any, as_of: date) -> bool:
    """True when the offer is enabled and start_date <= as_of <= end_date."""
    as_of = _as_date(as_of)
    return bool(offer.is_active) and _as_date(offer.start_date) <= as_of <= _as_date(offer.end_date)


def active_offers(offers: Sequence[Any], as_of: date) -> List[Any]:
    """Offers active on `as_of`, in their original order."""
    return [offer for offer in offers if is_offer_active(offer, as_of)]


def latest_active_offer(offers: Sequence[Any], as_of: date) -> Optional[Any]:
    """Most recently created active offer, or None."""
    matching = active_offers(offers, as_of)
    if not matching:
        return None
    return max(matching, key=lambda offer: (offer.created_at, offer.id))
