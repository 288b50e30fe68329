"""
Presentation formatting for report values.

Turns numbers into display strings. Nothing here feeds back into
aggregation.
"""

from .aggregation import Aggregation, ValueField
from .locale import DEFAULT_LOCALE, ReportLocale


def format_number(value: float, decimals: int, locale: ReportLocale = DEFAULT_LOCALE) -> str:
    """Format a number with fixed decimals and locale separators."""
    text = f"{value:,.{decimals}f}"
    return text.translate(
        str.maketrans({",": locale.thousands_separator, ".": locale.decimal_separator})
    )


def format_currency(value: float, decimals: int = 2, locale: ReportLocale = DEFAULT_LOCALE) -> str:
    """Format a monetary amount with the locale currency symbol."""
    amount = format_number(abs(value), decimals, locale)
    sign = "-" if value < 0 and amount.strip("0.,") else ""
    if locale.currency_suffix:
        return f"{sign}{amount} {locale.currency_symbol}"
    return f"{sign}{locale.currency_symbol}{amount}"


def format_quantity(value: float, locale: ReportLocale = DEFAULT_LOCALE) -> str:
    """Format a quantity with at most one decimal place."""
    text = f"{value:,.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text.translate(
        str.maketrans({",": locale.thousands_separator, ".": locale.decimal_separator})
    )


def format_cell_value(
    value: float,
    field: ValueField,
    aggregation: Aggregation,
    locale: ReportLocale = DEFAULT_LOCALE,
) -> str:
    """Format an aggregated cell value for display.

    Counts render as integers, costs with 2 decimals, unit prices (and
    weighted averages, which are always unit prices) with 3 decimals and
    quantities with up to 1 decimal.
    """
    if aggregation == Aggregation.COUNT or field == ValueField.COUNT:
        return format_number(value, 0, locale)
    if field.is_unit_price or aggregation == Aggregation.WEIGHTED_AVG:
        return format_currency(value, 3, locale)
    if field == ValueField.COST:
        return format_currency(value, 2, locale)
    return format_quantity(value, locale)
