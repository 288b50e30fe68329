"""
Consumption costing and cost-weighted averages.

Attaches monetary cost to consumption records and aggregates it.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from .models import ConsumptionRecord, PriceTier
from .pricing import PriceTierTable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ensure_consumption_costs(
    records: Iterable[ConsumptionRecord],
    price_tiers: Iterable[PriceTier],
) -> List[ConsumptionRecord]:
    """Ensure every consumption record carries a cost.

    Records that already have a positive cost are passed through as-is, so
    running this on priced data is a no-op. Everything else is priced from
    the applicable tier, or set to 0.0 when no tier covers the day. Priced
    records without a supplier take the supplier of their tier.

    Args:
        records: Consumption records (not modified)
        price_tiers: All known price tiers

    Returns:
        New list of records, in input order
    """
    table = PriceTierTable.from_tiers(price_tiers)
    result = []
    unresolved = 0

    for record in records:
        if record.cost is not None and record.cost > 0:
            result.append(record)
            continue

        tier = table.find_tier(record.feed_type_id, record.date)
        if tier is None:
            logger.warning(
                "No price tier found for feed type %s on %s",
                record.feed_type_id,
                record.date.isoformat(),
            )
            unresolved += 1
            result.append(replace(record, cost=0.0))
            continue

        result.append(replace(
            record,
            cost=record.quantity * tier.price_per_unit,
            supplier=record.supplier or tier.supplier,
        ))

    if unresolved:
        logger.debug("%d of %d records had no applicable price tier", unresolved, len(result))
    return result


def calculate_weighted_average_price(records: Iterable[ConsumptionRecord]) -> float:
    """Calculate the quantity-weighted average unit price.

    This is total cost divided by total quantity, not the mean of per-record
    unit prices. Quantity of records without a cost still counts towards the
    denominator.

    Args:
        records: Consumption records

    Returns:
        Weighted average price, or 0.0 when total quantity is zero
    """
    total_cost = 0.0
    total_quantity = 0.0
    for record in records:
        total_cost += record.cost or 0.0
        total_quantity += record.quantity

    if total_quantity == 0:
        return 0.0
    return total_cost / total_quantity


def group_consumption(
    records: Iterable[ConsumptionRecord],
    key_func: Callable[[ConsumptionRecord], str],
    aggregate_func: Callable[[str, List[ConsumptionRecord]], T],
) -> List[T]:
    """Group records by key and aggregate each group.

    Groups are returned in the order their key was first seen.
    """
    groups: Dict[str, List[ConsumptionRecord]] = {}
    for record in records:
        groups.setdefault(key_func(record), []).append(record)
    return [aggregate_func(key, items) for key, items in groups.items()]


@dataclass(frozen=True)
class FeedTypeTotals:
    """Aggregated consumption for a single feed type."""
    feed_type_id: str
    feed_type_name: Optional[str]
    total_quantity: float
    total_cost: float
    weighted_avg_price: float
    record_count: int


def summarize_by_feed_type(records: Iterable[ConsumptionRecord]) -> List[FeedTypeTotals]:
    """Total quantity and cost per feed type."""

    def _totals(feed_type_id: str, items: List[ConsumptionRecord]) -> FeedTypeTotals:
        return FeedTypeTotals(
            feed_type_id=feed_type_id,
            feed_type_name=items[0].feed_type_name,
            total_quantity=sum(item.quantity for item in items),
            total_cost=sum(item.cost or 0.0 for item in items),
            weighted_avg_price=calculate_weighted_average_price(items),
            record_count=len(items),
        )

    return group_consumption(records, lambda record: record.feed_type_id, _totals)
