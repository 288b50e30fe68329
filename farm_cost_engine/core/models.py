"""
Data models for the cost engine.

Defines the immutable records the engine reads: consumption, price tiers,
and animal count intervals.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


def _require_date(value: object, field_name: str, optional: bool = False) -> Optional[date]:
    """Validate a date field, narrowing datetimes to their date part."""
    if value is None and optional:
        return None
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise ValueError(f"{field_name} must be a date, got {value!r}")
    return value


def _require_number(value: object, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{field_name} must be finite, got {value!r}")


@dataclass(frozen=True)
class Relation:
    """Categorical foreign key with its display name."""
    id: str
    name: str


@dataclass(frozen=True)
class ConsumptionRecord:
    """Immutable record of feed consumed on a single day.

    Cost is optional until the record has been priced against the
    price tiers; see ``ensure_consumption_costs``.
    """
    date: date
    feed_type_id: str
    quantity: float
    cost: Optional[float] = None
    feed_type_name: Optional[str] = None
    area: Optional[Relation] = None
    area_group: Optional[Relation] = None
    supplier: Optional[Relation] = None
    price_per_unit: Optional[float] = None

    def __post_init__(self):
        """Validate date and numeric fields."""
        object.__setattr__(self, "date", _require_date(self.date, "date"))
        _require_number(self.quantity, "quantity")
        if self.cost is not None:
            _require_number(self.cost, "cost")
        if self.price_per_unit is not None:
            _require_number(self.price_per_unit, "price_per_unit")


@dataclass(frozen=True)
class PriceTier:
    """Unit price for a feed type, valid over an inclusive date range.

    ``valid_to`` of None means the price is still current.
    """
    feed_type_id: str
    price_per_unit: float
    valid_from: date
    valid_to: Optional[date] = None
    supplier: Optional[Relation] = None

    def __post_init__(self):
        """Validate the validity interval."""
        object.__setattr__(self, "valid_from", _require_date(self.valid_from, "valid_from"))
        object.__setattr__(
            self, "valid_to", _require_date(self.valid_to, "valid_to", optional=True)
        )
        _require_number(self.price_per_unit, "price_per_unit")
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")

    def covers(self, on: date) -> bool:
        """Whether the tier is valid on the given day."""
        return self.valid_from <= on and (self.valid_to is None or self.valid_to >= on)


@dataclass(frozen=True)
class AnimalCountEntry:
    """Number of animals present over a date interval.

    A missing end date means the group is still present.
    """
    count: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        """Validate dates."""
        _require_number(self.count, "count")
        object.__setattr__(
            self, "start_date", _require_date(self.start_date, "start_date", optional=True)
        )
        object.__setattr__(
            self, "end_date", _require_date(self.end_date, "end_date", optional=True)
        )


@dataclass(frozen=True)
class LivestockCountDetail:
    """Animal count for one area or area group within a cycle."""
    count: int
    start_date: date
    end_date: Optional[date] = None
    area_id: Optional[str] = None
    area_group_id: Optional[str] = None

    def __post_init__(self):
        """Validate dates."""
        _require_number(self.count, "count")
        object.__setattr__(self, "start_date", _require_date(self.start_date, "start_date"))
        object.__setattr__(
            self, "end_date", _require_date(self.end_date, "end_date", optional=True)
        )

    def to_entry(self) -> AnimalCountEntry:
        """Convert to an interval entry for concurrency calculations."""
        return AnimalCountEntry(
            count=self.count,
            start_date=self.start_date,
            end_date=self.end_date,
        )
