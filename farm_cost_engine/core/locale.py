"""
Locale presets for report labels and numbers.

Bundles everything that differs between report languages: month names,
date and week label formats, fallback labels, and number separators.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class ReportLocale:
    """Label and number conventions for one report language."""
    code: str
    month_names: Tuple[str, ...]
    date_format: str
    week_label: str
    quarter_label: str
    unknown_feed_type: str
    no_area: str
    no_area_group: str
    no_supplier: str
    decimal_separator: str
    thousands_separator: str
    currency_symbol: str
    currency_suffix: bool

    def __post_init__(self):
        """Validate month names and separators."""
        if len(self.month_names) != 12:
            raise ValueError("month_names must contain exactly 12 entries")
        if self.decimal_separator == self.thousands_separator:
            raise ValueError("decimal and thousands separators must differ")


EN_LOCALE = ReportLocale(
    code="en",
    month_names=(
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    date_format="%d.%m.%Y",
    week_label="week {week}, {year}",
    quarter_label="{year} Q{quarter}",
    unknown_feed_type="unknown",
    no_area="no area",
    no_area_group="no group",
    no_supplier="no supplier",
    decimal_separator=".",
    thousands_separator=",",
    currency_symbol="€",
    currency_suffix=False,
)

DE_LOCALE = ReportLocale(
    code="de",
    month_names=(
        "Januar", "Februar", "März", "April", "Mai", "Juni",
        "Juli", "August", "September", "Oktober", "November", "Dezember",
    ),
    date_format="%d.%m.%Y",
    week_label="KW {week}, {year}",
    quarter_label="{year} Q{quarter}",
    unknown_feed_type="Unbekannt",
    no_area="Ohne Bereich",
    no_area_group="Ohne Gruppe",
    no_supplier="Ohne Lieferant",
    decimal_separator=",",
    thousands_separator=".",
    currency_symbol="€",
    currency_suffix=True,
)

LOCALES: Dict[str, ReportLocale] = {
    EN_LOCALE.code: EN_LOCALE,
    DE_LOCALE.code: DE_LOCALE,
}

DEFAULT_LOCALE = EN_LOCALE


def get_locale(code: str) -> ReportLocale:
    """Get a locale preset by its code.

    Raises:
        ValueError: If no preset exists for the code
    """
    try:
        return LOCALES[code.lower()]
    except KeyError:
        raise ValueError(f"Unsupported locale: {code} (valid: {sorted(LOCALES)})")
