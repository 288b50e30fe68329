"""
Dimension bucketing for reports.

Maps a consumption record to a discrete bucket for a temporal or
categorical dimension. Bucket keys sort chronologically as plain strings.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Callable, Dict, Optional

from .locale import DEFAULT_LOCALE, ReportLocale
from .models import ConsumptionRecord, Relation


class Dimension(Enum):
    """Attributes records can be grouped by."""
    DATE = "date"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    FEED_TYPE = "feed_type"
    AREA = "area"
    AREA_GROUP = "area_group"
    SUPPLIER = "supplier"

    @property
    def is_temporal(self) -> bool:
        return self in _TEMPORAL


_TEMPORAL = frozenset(
    {Dimension.DATE, Dimension.WEEK, Dimension.MONTH, Dimension.QUARTER, Dimension.YEAR}
)


def parse_dimension(tag) -> Dimension:
    """Convert a dimension tag to a Dimension.

    Raises:
        ValueError: If the tag is not one of the supported dimensions
    """
    if isinstance(tag, Dimension):
        return tag
    if not isinstance(tag, str):
        raise ValueError(f"Dimension must be a string, got {tag!r}")
    try:
        return Dimension(tag.strip().lower())
    except ValueError:
        valid = [dimension.value for dimension in Dimension]
        raise ValueError(f"Unsupported dimension: {tag} (valid: {valid})")


@dataclass(frozen=True)
class DimensionBucket:
    """Bucket key used for grouping, plus its display label."""
    key: str
    label: str


def _date_bucket(record: ConsumptionRecord, locale: ReportLocale) -> DimensionBucket:
    return DimensionBucket(
        key=record.date.isoformat(),
        label=record.date.strftime(locale.date_format),
    )


def _week_bucket(record: ConsumptionRecord, locale: ReportLocale) -> DimensionBucket:
    iso_year, iso_week, iso_weekday = record.date.isocalendar()
    week_start = record.date - timedelta(days=iso_weekday - 1)
    return DimensionBucket(
        key=week_start.isoformat(),
        label=locale.week_label.format(week=iso_week, year=iso_year),
    )


def _month_bucket(record: ConsumptionRecord, locale: ReportLocale) -> DimensionBucket:
    month_name = locale.month_names[record.date.month - 1]
    return DimensionBucket(
        key=f"{record.date.year:04d}-{record.date.month:02d}",
        label=f"{month_name} {record.date.year}",
    )


def _quarter_bucket(record: ConsumptionRecord, locale: ReportLocale) -> DimensionBucket:
    quarter = (record.date.month - 1) // 3 + 1
    return DimensionBucket(
        key=f"{record.date.year:04d}-Q{quarter}",
        label=locale.quarter_label.format(year=record.date.year, quarter=quarter),
    )


def _year_bucket(record: ConsumptionRecord, locale: ReportLocale) -> DimensionBucket:
    year = f"{record.date.year:04d}"
    return DimensionBucket(key=year, label=year)


def _named_bucket(name: Optional[str], fallback: str) -> DimensionBucket:
    label = name or fallback
    return DimensionBucket(key=label, label=label)


def _relation_name(relation: Optional[Relation]) -> Optional[str]:
    return relation.name if relation is not None else None


_EXTRACTORS: Dict[Dimension, Callable[[ConsumptionRecord, ReportLocale], DimensionBucket]] = {
    Dimension.DATE: _date_bucket,
    Dimension.WEEK: _week_bucket,
    Dimension.MONTH: _month_bucket,
    Dimension.QUARTER: _quarter_bucket,
    Dimension.YEAR: _year_bucket,
    Dimension.FEED_TYPE: lambda record, locale: _named_bucket(
        record.feed_type_name, locale.unknown_feed_type
    ),
    Dimension.AREA: lambda record, locale: _named_bucket(
        _relation_name(record.area), locale.no_area
    ),
    Dimension.AREA_GROUP: lambda record, locale: _named_bucket(
        _relation_name(record.area_group), locale.no_area_group
    ),
    Dimension.SUPPLIER: lambda record, locale: _named_bucket(
        _relation_name(record.supplier), locale.no_supplier
    ),
}


def extract_dimension(
    record: ConsumptionRecord,
    dimension: Dimension,
    locale: ReportLocale = DEFAULT_LOCALE,
) -> DimensionBucket:
    """Get the bucket a record falls into for a dimension.

    Args:
        record: Consumption record
        dimension: Dimension to bucket by
        locale: Label conventions

    Returns:
        DimensionBucket with sortable key and display label

    Raises:
        ValueError: If the dimension is not supported
    """
    return _EXTRACTORS[parse_dimension(dimension)](record, locale)
