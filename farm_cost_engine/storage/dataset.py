"""
Dataset loading from YAML.

Reads consumption, price tiers and animal counts exported from the farm
database into engine models.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from farm_cost_engine.config.loader import check_keys, read_yaml
from farm_cost_engine.core.models import (
    AnimalCountEntry,
    ConsumptionRecord,
    PriceTier,
    Relation,
)


@dataclass(frozen=True)
class CycleWindow:
    """Date range of a livestock cycle."""
    start_date: date
    end_date: Optional[date] = None


@dataclass
class Dataset:
    """Everything the CLI reports operate on."""
    consumption: List[ConsumptionRecord] = field(default_factory=list)
    price_tiers: List[PriceTier] = field(default_factory=list)
    animal_counts: List[AnimalCountEntry] = field(default_factory=list)
    cycle: Optional[CycleWindow] = None


def parse_date(value: Any, path: str, optional: bool = False) -> Optional[date]:
    """Parse an ISO date (or a date already parsed by YAML).

    Raises:
        ValueError: If the value is missing or not a valid date
    """
    if value is None:
        if optional:
            return None
        raise ValueError(f"Missing required date '{path}'")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValueError(f"'{path}' is not a valid ISO date: {value!r}")
    raise ValueError(f"'{path}' must be a date, got {value!r}")


def _parse_number(value: Any, path: str, optional: bool = False) -> Optional[float]:
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{path}' must be a number")
    return float(value)


def _parse_relation(value: Any, path: str) -> Optional[Relation]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"'{path}' must be a dictionary with 'id' and 'name'")
    check_keys(value, {'id', 'name'}, path)
    if 'id' not in value or 'name' not in value:
        raise ValueError(f"'{path}' requires both 'id' and 'name'")
    return Relation(id=str(value['id']), name=str(value['name']))


def _require(data: Dict, key: str, path: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required '{key}' in {path}")
    return data[key]


def _parse_list(raw: Dict, key: str) -> List[Dict]:
    items = raw.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"'{key}' must be a list")
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"{key}[{i}] must be a dictionary")
    return items


def _parse_price_tier(data: Dict, path: str) -> PriceTier:
    check_keys(data, {'feed_type_id', 'price_per_unit', 'valid_from', 'valid_to', 'supplier'}, path)
    return PriceTier(
        feed_type_id=str(_require(data, 'feed_type_id', path)),
        price_per_unit=_parse_number(_require(data, 'price_per_unit', path), f"{path}.price_per_unit"),
        valid_from=parse_date(data.get('valid_from'), f"{path}.valid_from"),
        valid_to=parse_date(data.get('valid_to'), f"{path}.valid_to", optional=True),
        supplier=_parse_relation(data.get('supplier'), f"{path}.supplier"),
    )


def _parse_consumption(data: Dict, path: str) -> ConsumptionRecord:
    allowed_keys = {
        'date', 'feed_type_id', 'feed_type_name', 'quantity', 'cost',
        'price_per_unit', 'area', 'area_group', 'supplier',
    }
    check_keys(data, allowed_keys, path)
    feed_type_name = data.get('feed_type_name')
    return ConsumptionRecord(
        date=parse_date(data.get('date'), f"{path}.date"),
        feed_type_id=str(_require(data, 'feed_type_id', path)),
        quantity=_parse_number(_require(data, 'quantity', path), f"{path}.quantity"),
        cost=_parse_number(data.get('cost'), f"{path}.cost", optional=True),
        feed_type_name=str(feed_type_name) if feed_type_name is not None else None,
        area=_parse_relation(data.get('area'), f"{path}.area"),
        area_group=_parse_relation(data.get('area_group'), f"{path}.area_group"),
        supplier=_parse_relation(data.get('supplier'), f"{path}.supplier"),
        price_per_unit=_parse_number(
            data.get('price_per_unit'), f"{path}.price_per_unit", optional=True
        ),
    )


def _parse_animal_count(data: Dict, path: str) -> AnimalCountEntry:
    check_keys(data, {'count', 'start_date', 'end_date'}, path)
    count = _require(data, 'count', path)
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"'{path}.count' must be an integer")
    return AnimalCountEntry(
        count=count,
        start_date=parse_date(data.get('start_date'), f"{path}.start_date", optional=True),
        end_date=parse_date(data.get('end_date'), f"{path}.end_date", optional=True),
    )


def load_dataset(path: str) -> Dataset:
    """Load and validate a dataset from a YAML file.

    Args:
        path: Path to YAML dataset file

    Returns:
        Dataset with parsed model objects

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If the content is invalid
    """
    raw = read_yaml(path, "dataset")
    check_keys(raw, {'consumption', 'price_tiers', 'animal_counts', 'cycle'}, "")

    cycle = None
    if raw.get('cycle') is not None:
        cycle_data = raw['cycle']
        if not isinstance(cycle_data, dict):
            raise ValueError("'cycle' must be a dictionary")
        check_keys(cycle_data, {'start_date', 'end_date'}, "cycle")
        cycle = CycleWindow(
            start_date=parse_date(cycle_data.get('start_date'), "cycle.start_date"),
            end_date=parse_date(cycle_data.get('end_date'), "cycle.end_date", optional=True),
        )

    return Dataset(
        consumption=[
            _parse_consumption(item, f"consumption[{i}]")
            for i, item in enumerate(_parse_list(raw, 'consumption'))
        ],
        price_tiers=[
            _parse_price_tier(item, f"price_tiers[{i}]")
            for i, item in enumerate(_parse_list(raw, 'price_tiers'))
        ],
        animal_counts=[
            _parse_animal_count(item, f"animal_counts[{i}]")
            for i, item in enumerate(_parse_list(raw, 'animal_counts'))
        ],
        cycle=cycle,
    )
