"""
Price tier resolution.

Finds the unit price that applied to a feed type on a given day.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from .models import ConsumptionRecord, PriceTier


def find_applicable_price_tier(
    feed_type_id: str,
    on: date,
    price_tiers: Iterable[PriceTier],
) -> Optional[PriceTier]:
    """Find the price tier valid for a feed type on a given day.

    Validity intervals may overlap while a new price is phased in. In that
    case the tier that started most recently wins. Among tiers starting on
    the same day, the first one in input order is returned.

    Args:
        feed_type_id: Feed type to look up
        on: Day of consumption
        price_tiers: All known price tiers

    Returns:
        The applicable PriceTier, or None if no tier covers the day
    """
    best: Optional[PriceTier] = None
    for tier in price_tiers:
        if tier.feed_type_id != feed_type_id or not tier.covers(on):
            continue
        if best is None or tier.valid_from > best.valid_from:
            best = tier
    return best


@dataclass(frozen=True)
class PriceTierTable:
    """Price tiers indexed by feed type."""
    tiers_by_feed_type: Dict[str, List[PriceTier]] = field(default_factory=dict)

    @classmethod
    def from_tiers(cls, price_tiers: Iterable[PriceTier]) -> "PriceTierTable":
        """Build a table from a flat tier collection, keeping input order."""
        index: Dict[str, List[PriceTier]] = {}
        for tier in price_tiers:
            index.setdefault(tier.feed_type_id, []).append(tier)
        return cls(index)

    def find_tier(self, feed_type_id: str, on: date) -> Optional[PriceTier]:
        """Get the applicable tier for a feed type on a given day."""
        return find_applicable_price_tier(
            feed_type_id, on, self.tiers_by_feed_type.get(feed_type_id, ())
        )

    def __len__(self) -> int:
        return sum(len(tiers) for tiers in self.tiers_by_feed_type.values())


def calculate_consumption_cost(
    record: ConsumptionRecord,
    price_tiers: Sequence[PriceTier],
) -> float:
    """Calculate the cost of a consumption record from price tiers.

    Args:
        record: Consumption to price
        price_tiers: All known price tiers

    Returns:
        quantity * price_per_unit, or 0.0 if no tier applies
    """
    tier = find_applicable_price_tier(record.feed_type_id, record.date, price_tiers)
    if tier is None:
        return 0.0
    return record.quantity * tier.price_per_unit
