"""
Value fields and aggregation functions for pivot cells.

Each aggregation is a pure function over the records of one cell.
"""

from enum import Enum
from typing import Callable, Dict, List, Sequence

from .costing import calculate_weighted_average_price
from .models import ConsumptionRecord


class ValueField(Enum):
    """Numeric fields that can be aggregated."""
    QUANTITY = "quantity"
    COST = "cost"
    AVG_PRICE = "avg_price"
    MIN_PRICE = "min_price"
    MAX_PRICE = "max_price"
    COUNT = "count"

    @property
    def is_unit_price(self) -> bool:
        return self in (ValueField.AVG_PRICE, ValueField.MIN_PRICE, ValueField.MAX_PRICE)


class Aggregation(Enum):
    """Supported aggregation functions."""
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    COUNT = "count"
    WEIGHTED_AVG = "weighted_avg"


def parse_value_field(tag) -> ValueField:
    """Convert a field tag to a ValueField.

    Raises:
        ValueError: If the tag is not a supported field
    """
    if isinstance(tag, ValueField):
        return tag
    if not isinstance(tag, str):
        raise ValueError(f"Value field must be a string, got {tag!r}")
    try:
        return ValueField(tag.strip().lower())
    except ValueError:
        valid = [value_field.value for value_field in ValueField]
        raise ValueError(f"Unsupported value field: {tag} (valid: {valid})")


def parse_aggregation(tag) -> Aggregation:
    """Convert an aggregation tag to an Aggregation.

    Raises:
        ValueError: If the tag is not a supported aggregation
    """
    if isinstance(tag, Aggregation):
        return tag
    if not isinstance(tag, str):
        raise ValueError(f"Aggregation must be a string, got {tag!r}")
    try:
        return Aggregation(tag.strip().lower())
    except ValueError:
        valid = [aggregation.value for aggregation in Aggregation]
        raise ValueError(f"Unsupported aggregation: {tag} (valid: {valid})")


def _unit_price(record: ConsumptionRecord) -> float:
    if record.price_per_unit:
        return record.price_per_unit
    if record.quantity > 0:
        return (record.cost or 0.0) / record.quantity
    return 0.0


_FIELD_EXTRACTORS: Dict[ValueField, Callable[[ConsumptionRecord], float]] = {
    ValueField.QUANTITY: lambda record: record.quantity,
    ValueField.COST: lambda record: record.cost or 0.0,
    ValueField.AVG_PRICE: _unit_price,
    ValueField.MIN_PRICE: _unit_price,
    ValueField.MAX_PRICE: _unit_price,
    ValueField.COUNT: lambda record: 1.0,
}


def field_value(record: ConsumptionRecord, field: ValueField) -> float:
    """Extract the numeric value of a field from a record."""
    return _FIELD_EXTRACTORS[field](record)


def _values(records: Sequence[ConsumptionRecord], field: ValueField) -> List[float]:
    return [field_value(record, field) for record in records]


def _sum(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    return sum(_values(records, field))


def _avg(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    values = _values(records, field)
    return sum(values) / len(values) if values else 0.0


def _min(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    return min(_values(records, field), default=0.0)


def _max(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    return max(_values(records, field), default=0.0)


def _count(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    return float(len(records))


def _weighted_avg(records: Sequence[ConsumptionRecord], field: ValueField) -> float:
    # Cost over quantity of the whole subset, whatever the field
    return calculate_weighted_average_price(records)


AGGREGATORS: Dict[Aggregation, Callable[[Sequence[ConsumptionRecord], ValueField], float]] = {
    Aggregation.SUM: _sum,
    Aggregation.AVG: _avg,
    Aggregation.MIN: _min,
    Aggregation.MAX: _max,
    Aggregation.COUNT: _count,
    Aggregation.WEIGHTED_AVG: _weighted_avg,
}


def aggregate(
    records: Sequence[ConsumptionRecord],
    field: ValueField,
    aggregation: Aggregation,
) -> float:
    """Aggregate a field over a set of records.

    Args:
        records: Records contributing to one cell
        field: Field to extract from each record
        aggregation: Aggregation to apply

    Returns:
        Aggregated value, 0.0 for an empty record set
    """
    if not records:
        return 0.0
    return AGGREGATORS[aggregation](records, field)
