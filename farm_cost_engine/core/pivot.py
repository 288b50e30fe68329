"""
Pivot table construction over consumption records.

Builds a grid of aggregated values from row and column dimensions and a
list of value specs. Every cell, subtotal and grand total is computed from
the raw records it covers, never from other cells.
"""

import itertools
import logging
import math
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .aggregation import Aggregation, ValueField, aggregate, parse_aggregation, parse_value_field
from .dimensions import Dimension, extract_dimension, parse_dimension
from .formatting import format_cell_value
from .locale import DEFAULT_LOCALE, ReportLocale
from .models import ConsumptionRecord

logger = logging.getLogger(__name__)

CellFormatter = Callable[[float, ValueField, Aggregation], str]


@dataclass(frozen=True)
class ValueSpec:
    """A field to aggregate and how to aggregate it."""
    field: ValueField
    aggregation: Aggregation = Aggregation.SUM
    label: Optional[str] = None

    def __post_init__(self):
        """Coerce string tags to their enums."""
        object.__setattr__(self, "field", parse_value_field(self.field))
        object.__setattr__(self, "aggregation", parse_aggregation(self.aggregation))

    @property
    def display_label(self) -> str:
        """Header label for this value."""
        return self.label or self.field.value


@dataclass(frozen=True)
class PivotConfig:
    """Layout of a pivot table.

    Dimension tags are validated on construction.
    """
    rows: Tuple[Dimension, ...] = ()
    columns: Tuple[Dimension, ...] = ()
    values: Tuple[ValueSpec, ...] = ()
    show_grand_totals: bool = False
    show_subtotals: bool = False

    def __post_init__(self):
        """Validate dimensions and value specs."""
        rows = tuple(parse_dimension(tag) for tag in self.rows)
        columns = tuple(parse_dimension(tag) for tag in self.columns)
        values = tuple(self.values)

        seen = set()
        for dimension in rows + columns:
            if dimension in seen:
                raise ValueError(f"Dimension '{dimension.value}' is used more than once")
            seen.add(dimension)

        for i, spec in enumerate(values):
            if not isinstance(spec, ValueSpec):
                raise ValueError(f"values[{i}] must be a ValueSpec, got {spec!r}")

        object.__setattr__(self, "rows", rows)
        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "values", values)


@dataclass(frozen=True)
class ColumnKey:
    """Identifies one pivot column: column bucket keys plus value spec."""
    dimension_values: Tuple[str, ...]
    value_spec_index: int


@dataclass(frozen=True)
class PivotCell:
    """Aggregated value at one row/column intersection."""
    value: float
    count: int
    formatted_value: str = ""


@dataclass
class PivotRow:
    """One row of the pivot grid."""
    keys: Tuple[str, ...]
    dimensions: Dict[Dimension, str]
    cells: Dict[ColumnKey, PivotCell] = field(default_factory=dict)
    level: int = 0
    is_subtotal: bool = False


@dataclass
class PivotTableData:
    """Complete pivot table ready for rendering."""
    column_headers: List[List[str]]
    column_keys: List[ColumnKey]
    rows: List[PivotRow]
    grand_totals: Optional[Dict[ColumnKey, PivotCell]] = None


class _BucketIndex:
    """Bucket keys and labels for each record, computed once per build."""

    def __init__(
        self,
        records: Sequence[ConsumptionRecord],
        dimensions: Sequence[Dimension],
        locale: ReportLocale,
    ):
        self.records = records
        self.keys: List[Dict[Dimension, str]] = []
        self.labels: Dict[Dimension, Dict[str, str]] = {dim: {} for dim in dimensions}

        for record in records:
            record_keys = {}
            for dimension in dimensions:
                bucket = extract_dimension(record, dimension, locale)
                record_keys[dimension] = bucket.key
                self.labels[dimension].setdefault(bucket.key, bucket.label)
            self.keys.append(record_keys)

    def sorted_keys(self, dimension: Dimension) -> List[str]:
        return sorted(self.labels[dimension])

    def label(self, dimension: Dimension, key: str) -> str:
        return self.labels[dimension].get(key, key)

    def key_tuple(self, index: int, dimensions: Sequence[Dimension]) -> Tuple[str, ...]:
        record_keys = self.keys[index]
        return tuple(record_keys[dimension] for dimension in dimensions)


def generate_column_keys(
    column_values: Sequence[Sequence[str]],
    value_count: int,
) -> List[ColumnKey]:
    """Generate the column key space.

    The Cartesian product of the distinct keys of each column dimension,
    in dimension order, crossed with one index per value spec.
    """
    return [
        ColumnKey(tuple(combination), value_index)
        for combination in itertools.product(*column_values)
        for value_index in range(value_count)
    ]


def generate_column_headers(
    config: PivotConfig,
    column_values: Sequence[Sequence[str]],
    label_for: Callable[[Dimension, str], str],
) -> List[List[str]]:
    """Build header rows aligned with ``generate_column_keys``.

    Outer dimensions repeat each label across all columns nested below it;
    inner dimensions repeat their full label sequence once per outer
    combination.
    """
    value_labels = [spec.display_label for spec in config.values]
    if not config.columns:
        return [value_labels]

    value_count = len(config.values)
    headers = []
    for dim_index, dimension in enumerate(config.columns):
        repeat_before = math.prod(len(values) for values in column_values[:dim_index])
        repeat_after = math.prod(len(values) for values in column_values[dim_index + 1:]) * value_count

        row = []
        for _ in range(repeat_before):
            for key in column_values[dim_index]:
                row.extend([label_for(dimension, key)] * repeat_after)
        headers.append(row)

    if value_count > 1:
        combinations = math.prod(len(values) for values in column_values)
        headers.append(value_labels * combinations)

    return headers


def _resolve_value_spec(config: PivotConfig, column_key: ColumnKey) -> Optional[ValueSpec]:
    if 0 <= column_key.value_spec_index < len(config.values):
        return config.values[column_key.value_spec_index]
    return None


def _compute_cells(
    indices: Iterable[int],
    column_keys: Sequence[ColumnKey],
    config: PivotConfig,
    index: _BucketIndex,
    formatter: CellFormatter,
) -> Dict[ColumnKey, PivotCell]:
    indices = list(indices)
    cells = {}
    for column_key in column_keys:
        spec = _resolve_value_spec(config, column_key)
        if spec is None:
            logger.debug("Skipping column %s: no value spec at that index", column_key)
            continue

        subset = [
            index.records[i]
            for i in indices
            if index.key_tuple(i, config.columns) == column_key.dimension_values
        ]
        value = aggregate(subset, spec.field, spec.aggregation)
        cells[column_key] = PivotCell(
            value=value,
            count=len(subset),
            formatted_value=formatter(value, spec.field, spec.aggregation),
        )
    return cells


def build_pivot_table(
    records: Iterable[ConsumptionRecord],
    config: PivotConfig,
    locale: ReportLocale = DEFAULT_LOCALE,
    formatter: Optional[CellFormatter] = None,
) -> PivotTableData:
    """Build a pivot table from consumption records.

    Records are grouped by the row dimensions (rows in key order) and each
    group is split across the column key space. Each cell aggregates the
    records in its group matching the column's dimension values.

    Args:
        records: Consumption records, typically with costs already ensured
        config: Row/column dimensions, value specs and total flags
        locale: Label and number conventions
        formatter: Cell formatter; defaults to ``format_cell_value``

    Returns:
        PivotTableData with headers, column keys, rows and optional totals
    """
    records = list(records)
    if formatter is None:
        formatter = partial(format_cell_value, locale=locale)

    index = _BucketIndex(records, config.rows + config.columns, locale)
    column_values = [index.sorted_keys(dimension) for dimension in config.columns]
    column_keys = generate_column_keys(column_values, len(config.values))
    column_headers = generate_column_headers(config, column_values, index.label)

    groups: Dict[Tuple[str, ...], List[int]] = {}
    for i in range(len(records)):
        groups.setdefault(index.key_tuple(i, config.rows), []).append(i)

    with_subtotals = config.show_subtotals and len(config.rows) > 1
    detail_level = max(len(config.rows) - 1, 0)

    rows: List[PivotRow] = []
    run: List[int] = []
    row_keys = sorted(groups)
    for position, row_key in enumerate(row_keys):
        group = groups[row_key]
        rows.append(PivotRow(
            keys=row_key,
            dimensions={
                dimension: index.label(dimension, key)
                for dimension, key in zip(config.rows, row_key)
            },
            cells=_compute_cells(group, column_keys, config, index, formatter),
            level=detail_level,
        ))

        if not with_subtotals:
            continue
        run.extend(group)
        next_keys = row_keys[position + 1:position + 2]
        if not next_keys or next_keys[0][0] != row_key[0]:
            outer = config.rows[0]
            rows.append(PivotRow(
                keys=(row_key[0],),
                dimensions={outer: index.label(outer, row_key[0])},
                cells=_compute_cells(run, column_keys, config, index, formatter),
                level=0,
                is_subtotal=True,
            ))
            run = []

    grand_totals = None
    if config.show_grand_totals:
        grand_totals = _compute_cells(range(len(records)), column_keys, config, index, formatter)

    logger.debug(
        "Built pivot table with %d rows and %d columns from %d records",
        len(rows), len(column_keys), len(records),
    )
    return PivotTableData(
        column_headers=column_headers,
        column_keys=column_keys,
        rows=rows,
        grand_totals=grand_totals,
    )
