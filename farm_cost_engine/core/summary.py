"""
Feed component summary for a livestock cycle.

Breaks a cycle's feed consumption down per feed type.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from .costing import summarize_by_feed_type
from .livestock import calculate_cycle_duration
from .models import ConsumptionRecord, LivestockCountDetail


@dataclass(frozen=True)
class FeedComponentSummary:
    """Consumption figures for one feed type over a cycle."""
    feed_type_id: str
    feed_type_name: Optional[str]
    total_quantity: float
    total_cost: float
    weighted_avg_price: float
    percentage_of_total: float
    daily_consumption: float
    quantity_per_animal_per_day: float
    quantity_per_animal: float


def calculate_animal_days(
    details: Iterable[LivestockCountDetail],
    cycle_end: Optional[date] = None,
    today: Optional[date] = None,
) -> int:
    """Sum of count * days present over all count details."""
    total = 0
    for detail in details:
        end = detail.end_date or cycle_end
        total += detail.count * calculate_cycle_duration(detail.start_date, end, today)
    return total


def calculate_feed_component_summary(
    records: Iterable[ConsumptionRecord],
    cycle_start: date,
    cycle_end: Optional[date],
    details: Iterable[LivestockCountDetail],
    today: Optional[date] = None,
) -> List[FeedComponentSummary]:
    """Summarize a cycle's consumption per feed type.

    Records should already be costed and filtered to the cycle's
    timeframe.

    Args:
        records: Consumption records of the cycle
        cycle_start: First day of the cycle
        cycle_end: Last day of the cycle, or None if ongoing
        details: Livestock count details of the cycle
        today: Reference day for open timeframes

    Returns:
        One summary per feed type, highest total cost first
    """
    duration = calculate_cycle_duration(cycle_start, cycle_end, today)
    animal_days = calculate_animal_days(details, cycle_end, today)
    totals = summarize_by_feed_type(records)
    total_cost = sum(item.total_cost for item in totals)

    summaries = []
    for item in totals:
        per_animal_day = item.total_quantity / animal_days if animal_days > 0 else 0.0
        summaries.append(FeedComponentSummary(
            feed_type_id=item.feed_type_id,
            feed_type_name=item.feed_type_name,
            total_quantity=item.total_quantity,
            total_cost=item.total_cost,
            weighted_avg_price=item.weighted_avg_price,
            percentage_of_total=(item.total_cost / total_cost) * 100 if total_cost > 0 else 0.0,
            daily_consumption=item.total_quantity / duration if duration > 0 else 0.0,
            quantity_per_animal_per_day=per_animal_day,
            quantity_per_animal=per_animal_day * duration,
        ))

    return sorted(summaries, key=lambda summary: summary.total_cost, reverse=True)
