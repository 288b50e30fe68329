"""
Report configuration loading.

Reads pivot report definitions from YAML with strict validation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from farm_cost_engine.core.aggregation import Aggregation, parse_value_field
from farm_cost_engine.core.locale import DEFAULT_LOCALE, ReportLocale, get_locale
from farm_cost_engine.core.pivot import PivotConfig, ValueSpec


@dataclass(frozen=True)
class ReportConfig:
    """Complete report configuration."""
    pivot: PivotConfig
    locale: ReportLocale = DEFAULT_LOCALE


def read_yaml(path: str, description: str = "config") -> Dict[str, Any]:
    """Read a YAML file that must contain a mapping.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If the document is empty or not a mapping
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"{description.capitalize()} file not found: {path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {description} file {path}: {e}")

    if not raw:
        raise ValueError(f"{description.capitalize()} file is empty")
    if not isinstance(raw, dict):
        raise ValueError(f"{description.capitalize()} file must contain a mapping")
    return raw


def check_keys(data: Dict, allowed: set, path: str) -> None:
    """Reject keys outside the allowed set."""
    unknown_keys = set(data.keys()) - allowed
    if unknown_keys:
        where = f" in {path}" if path else ""
        raise ValueError(f"Unknown keys{where}: {unknown_keys}")


def load_report_config(path: str) -> ReportConfig:
    """Load and validate a report configuration from a YAML file.

    Unknown keys, dimensions and aggregations are rejected.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated ReportConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    raw_config = read_yaml(path, "config")
    check_keys(raw_config, {'locale', 'pivot'}, "")

    locale = DEFAULT_LOCALE
    if 'locale' in raw_config:
        locale_code = raw_config['locale']
        if not isinstance(locale_code, str):
            raise ValueError("'locale' must be a string")
        locale = get_locale(locale_code)

    if 'pivot' not in raw_config:
        raise ValueError("Missing required 'pivot' section")

    pivot_data = raw_config['pivot']
    if not isinstance(pivot_data, dict):
        raise ValueError("'pivot' must be a dictionary")

    return ReportConfig(
        pivot=parse_pivot_config(pivot_data, "pivot"),
        locale=locale,
    )


def parse_pivot_config(data: Dict, path: str = "pivot") -> PivotConfig:
    """Parse and validate a pivot configuration mapping.

    Args:
        data: Pivot configuration data
        path: Path for error messages

    Returns:
        Validated PivotConfig

    Raises:
        ValueError: If configuration is invalid
    """
    allowed_keys = {'rows', 'columns', 'values', 'show_grand_totals', 'show_subtotals'}
    check_keys(data, allowed_keys, path)

    rows = _parse_dimension_list(data.get('rows', []), f"{path}.rows")
    columns = _parse_dimension_list(data.get('columns', []), f"{path}.columns")

    if 'values' not in data:
        raise ValueError(f"Missing required 'values' in {path}")
    values_data = data['values']
    if not isinstance(values_data, list) or not values_data:
        raise ValueError(f"'values' in {path} must be a non-empty list")

    values = [
        _parse_value_spec(value_data, f"{path}.values[{i}]")
        for i, value_data in enumerate(values_data)
    ]

    flags = {}
    for flag in ('show_grand_totals', 'show_subtotals'):
        flag_value = data.get(flag, False)
        if not isinstance(flag_value, bool):
            raise ValueError(f"'{flag}' in {path} must be true or false")
        flags[flag] = flag_value

    try:
        return PivotConfig(rows=rows, columns=columns, values=tuple(values), **flags)
    except ValueError as e:
        raise ValueError(f"Invalid {path}: {e}")


def _parse_dimension_list(data: Any, path: str) -> List[str]:
    if not isinstance(data, list):
        raise ValueError(f"'{path}' must be a list")
    for i, tag in enumerate(data):
        if not isinstance(tag, str):
            raise ValueError(f"'{path}[{i}]' must be a string")
    return data


def _parse_value_spec(data: Any, path: str) -> ValueSpec:
    """Parse and validate a single value spec.

    Args:
        data: Value spec data
        path: Path for error messages

    Returns:
        Validated ValueSpec

    Raises:
        ValueError: If the value spec is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a dictionary")
    check_keys(data, {'field', 'aggregation', 'label'}, path)

    if 'field' not in data:
        raise ValueError(f"Missing required 'field' in {path}")

    label = data.get('label')
    if label is not None and not isinstance(label, str):
        raise ValueError(f"'label' in {path} must be a string")

    try:
        field = parse_value_field(data['field'])
        # Price fields default to the cost-weighted average
        default_aggregation = Aggregation.WEIGHTED_AVG if field.is_unit_price else Aggregation.SUM
        return ValueSpec(
            field=field,
            aggregation=data.get('aggregation', default_aggregation),
            label=label,
        )
    except ValueError as e:
        raise ValueError(f"Invalid {path}: {e}")
