"""
Unit tests for aggregation functions and value formatting.
"""

from datetime import date

import pytest

from farm_cost_engine.core.aggregation import (
    AGGREGATORS,
    Aggregation,
    ValueField,
    aggregate,
    field_value,
    parse_aggregation,
)
from farm_cost_engine.core.formatting import (
    format_cell_value,
    format_currency,
    format_number,
    format_quantity,
)
from farm_cost_engine.core.locale import DE_LOCALE, EN_LOCALE
from farm_cost_engine.core.models import ConsumptionRecord


@pytest.fixture
def records():
    """Two priced wheat records."""
    return [
        ConsumptionRecord(date(2024, 1, 1), "ft-1", 100, cost=50.0),
        ConsumptionRecord(date(2024, 1, 2), "ft-1", 200, cost=120.0),
    ]


class TestFieldValues:
    """Test per-record field extraction."""

    def test_unit_price_from_cost(self):
        """Verify unit price falls back to cost / quantity."""
        record = ConsumptionRecord(date(2024, 1, 1), "ft-1", 200, cost=120.0)
        assert field_value(record, ValueField.AVG_PRICE) == pytest.approx(0.6)

    def test_unit_price_without_quantity(self):
        """Verify zero quantity gives a zero unit price."""
        record = ConsumptionRecord(date(2024, 1, 1), "ft-1", 0, cost=10.0)
        assert field_value(record, ValueField.MIN_PRICE) == 0.0

    def test_missing_cost_is_zero(self):
        """Verify records without cost contribute zero cost."""
        record = ConsumptionRecord(date(2024, 1, 1), "ft-1", 10)
        assert field_value(record, ValueField.COST) == 0.0

    def test_count_is_one(self):
        """Verify every record counts once."""
        record = ConsumptionRecord(date(2024, 1, 1), "ft-1", 10)
        assert field_value(record, ValueField.COUNT) == 1.0


class TestAggregate:
    """Test aggregation functions."""

    def test_every_aggregation_is_registered(self):
        """Verify the registry covers the closed set."""
        assert set(AGGREGATORS) == set(Aggregation)

    def test_sum(self, records):
        assert aggregate(records, ValueField.QUANTITY, Aggregation.SUM) == 300

    def test_avg(self, records):
        assert aggregate(records, ValueField.COST, Aggregation.AVG) == pytest.approx(85.0)

    def test_min_max(self, records):
        assert aggregate(records, ValueField.MIN_PRICE, Aggregation.MIN) == pytest.approx(0.5)
        assert aggregate(records, ValueField.MAX_PRICE, Aggregation.MAX) == pytest.approx(0.6)

    def test_count(self, records):
        assert aggregate(records, ValueField.QUANTITY, Aggregation.COUNT) == 2

    def test_weighted_avg_ignores_field(self, records):
        """Verify weighted_avg is cost over quantity whatever the field."""
        for field in (ValueField.AVG_PRICE, ValueField.QUANTITY):
            assert aggregate(records, field, Aggregation.WEIGHTED_AVG) == pytest.approx(170 / 300)

    def test_empty_records(self):
        """Verify every aggregation of nothing is zero."""
        for aggregation in Aggregation:
            assert aggregate([], ValueField.COST, aggregation) == 0.0

    def test_unknown_aggregation_raises_error(self):
        """Verify tags outside the closed set are rejected."""
        with pytest.raises(ValueError, match="Unsupported aggregation"):
            parse_aggregation("mode")


class TestNumberFormatting:
    """Test locale-aware number formatting."""

    def test_english_currency(self):
        assert format_currency(1234.5, 2, EN_LOCALE) == "€1,234.50"

    def test_german_currency(self):
        assert format_currency(1234.5, 2, DE_LOCALE) == "1.234,50 €"

    def test_negative_currency(self):
        """Verify the sign precedes the amount."""
        assert format_currency(-3.5, 2, EN_LOCALE) == "-€3.50"
        assert format_currency(-3.5, 2, DE_LOCALE) == "-3,50 €"

    def test_rounded_negative_zero_has_no_sign(self):
        """Verify amounts that round to zero are not shown as negative."""
        assert format_currency(-0.0001, 2, EN_LOCALE) == "€0.00"
        assert format_currency(-0.0004, 3, DE_LOCALE) == "0,000 €"
        assert format_currency(-0.005, 3, EN_LOCALE) == "-€0.005"

    def test_number_separators(self):
        assert format_number(1234567.891, 2, DE_LOCALE) == "1.234.567,89"
        assert format_number(1234567.891, 0, EN_LOCALE) == "1,234,568"

    def test_quantity_drops_trailing_zero(self):
        """Verify whole quantities render without decimals."""
        assert format_quantity(300.0, EN_LOCALE) == "300"
        assert format_quantity(1234.5, EN_LOCALE) == "1,234.5"
        assert format_quantity(1234.5, DE_LOCALE) == "1.234,5"


class TestCellFormatting:
    """Test per-field cell formatting."""

    def test_cost_two_decimals(self):
        assert format_cell_value(1234.5, ValueField.COST, Aggregation.SUM) == "€1,234.50"

    def test_unit_price_three_decimals(self):
        assert format_cell_value(0.56667, ValueField.AVG_PRICE, Aggregation.AVG) == "€0.567"

    def test_weighted_avg_is_a_price(self):
        """Verify weighted averages render as unit prices for any field."""
        result = format_cell_value(0.5, ValueField.QUANTITY, Aggregation.WEIGHTED_AVG, DE_LOCALE)
        assert result == "0,500 €"

    def test_count_is_integer(self):
        assert format_cell_value(1200.0, ValueField.COST, Aggregation.COUNT) == "1,200"
        assert format_cell_value(3.0, ValueField.COUNT, Aggregation.SUM) == "3"

    def test_quantity(self):
        assert format_cell_value(1500.4, ValueField.QUANTITY, Aggregation.SUM, DE_LOCALE) == "1.500,4"
