"""
Livestock interval calculations.

Animals move between areas during a cycle, so summing all count entries
overstates the herd. These helpers work on the date intervals instead.
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from .models import AnimalCountEntry, ConsumptionRecord, LivestockCountDetail

# Start events sort before end events on the same day
_START = 0
_END = 1


def calculate_max_concurrent_count(
    entries: Iterable[AnimalCountEntry],
    window_start: date,
    window_end: Optional[date] = None,
) -> int:
    """Calculate the maximum number of animals present at the same time.

    Sweeps over start and end events of all intervals within the window.
    End dates are inclusive: an interval ending on the day another one
    starts overlaps with it, while one ending the day before does not.

    Args:
        entries: Animal count intervals
        window_start: Start of the cycle; also used for entries without start
        window_end: End of the cycle, or None for an ongoing cycle

    Returns:
        Peak sum of counts alive on any single day
    """
    events: List[Tuple[date, int, int]] = []

    for entry in entries:
        if entry.count <= 0:
            continue

        start = max(entry.start_date or window_start, window_start)
        end = entry.end_date or window_end
        if end is not None and window_end is not None:
            end = min(end, window_end)
        if end is not None and end < start:
            continue

        events.append((start, _START, entry.count))
        if end is not None:
            events.append((end, _END, -entry.count))

    events.sort(key=lambda event: (event[0], event[1]))

    running = 0
    peak = 0
    for _, _, delta in events:
        running += delta
        peak = max(peak, running)
    return peak


def calculate_max_animals_from_details(
    details: Iterable[LivestockCountDetail],
    cycle_start: date,
    cycle_end: Optional[date] = None,
) -> int:
    """Maximum concurrent animals from per-area count details."""
    return calculate_max_concurrent_count(
        [detail.to_entry() for detail in details], cycle_start, cycle_end
    )


def calculate_cycle_duration(
    start: date,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> int:
    """Length of a cycle in days, counting both start and end day.

    Ongoing cycles (no end) run until ``today``.
    """
    if end is None:
        end = today or date.today()
    return (end - start).days + 1


def _detail_matches(record: ConsumptionRecord, detail: LivestockCountDetail) -> bool:
    if record.area is not None and detail.area_id is not None and record.area.id == detail.area_id:
        return True
    if record.area_group is not None and detail.area_group_id is not None:
        return record.area_group.id == detail.area_group_id
    return False


def filter_consumption_by_timeframe(
    records: Iterable[ConsumptionRecord],
    details: Iterable[LivestockCountDetail],
    cycle_end: Optional[date] = None,
    today: Optional[date] = None,
) -> List[ConsumptionRecord]:
    """Keep consumption that fed animals of the given count details.

    A record is kept when its area (or area group) matches the first
    populated detail for it and its date lies within that detail's
    timeframe. Details without an end date run until the cycle end, or
    ``today`` for an ongoing cycle.

    Args:
        records: Consumption records for the cycle
        details: Livestock count details with areas and timeframes
        cycle_end: End of the cycle, or None if ongoing
        today: Reference day for open timeframes

    Returns:
        New list of matching records
    """
    populated = [detail for detail in details if detail.count > 0]
    fallback_end = cycle_end or today or date.today()

    result = []
    for record in records:
        detail = next((d for d in populated if _detail_matches(record, d)), None)
        if detail is None:
            continue
        end = detail.end_date or fallback_end
        if detail.start_date <= record.date <= end:
            result.append(record)
    return result
