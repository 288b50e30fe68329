"""
Unit tests for cost annotation and weighted averages.

Tests idempotent costing, weighted average semantics, and grouping.
"""

import logging
from datetime import date

import pytest

from farm_cost_engine.core.costing import (
    calculate_weighted_average_price,
    ensure_consumption_costs,
    group_consumption,
    summarize_by_feed_type,
)
from farm_cost_engine.core.models import ConsumptionRecord, PriceTier, Relation


@pytest.fixture
def price_tiers():
    """Wheat tiers with a price change on April 1st."""
    return [
        PriceTier("ft-1", 0.5, date(2024, 1, 1), date(2024, 3, 31)),
        PriceTier("ft-1", 0.6, date(2024, 4, 1), None),
    ]


class TestEnsureConsumptionCosts:
    """Test cost annotation from price tiers."""

    def test_costs_are_calculated(self, price_tiers):
        """Verify records without cost are priced from the applicable tier."""
        records = [
            ConsumptionRecord(date(2024, 2, 15), "ft-1", 100),
            ConsumptionRecord(date(2024, 5, 15), "ft-1", 200),
        ]
        result = ensure_consumption_costs(records, price_tiers)

        assert [r.cost for r in result] == pytest.approx([50.0, 120.0])

    def test_positive_cost_is_kept(self, price_tiers):
        """Verify existing positive costs pass through untouched."""
        record = ConsumptionRecord(date(2024, 2, 15), "ft-1", 100, cost=99.0)
        result = ensure_consumption_costs([record], price_tiers)

        assert result[0] is record

    def test_zero_cost_is_recalculated(self, price_tiers):
        """Verify a zero cost counts as missing."""
        record = ConsumptionRecord(date(2024, 2, 15), "ft-1", 100, cost=0.0)
        result = ensure_consumption_costs([record], price_tiers)

        assert result[0].cost == pytest.approx(50.0)

    def test_missing_tier_gives_zero_cost(self, price_tiers, caplog):
        """Verify unresolved tiers give cost 0 and log a warning."""
        record = ConsumptionRecord(date(2024, 2, 15), "ft-unknown", 100)

        with caplog.at_level(logging.WARNING, logger="farm_cost_engine.core.costing"):
            result = ensure_consumption_costs([record], price_tiers)

        assert result[0].cost == 0.0
        assert "ft-unknown" in caplog.text
        assert "2024-02-15" in caplog.text

    def test_input_is_not_mutated(self, price_tiers):
        """Verify a new list is returned and input records keep no cost."""
        records = [ConsumptionRecord(date(2024, 2, 15), "ft-1", 100)]
        result = ensure_consumption_costs(records, price_tiers)

        assert result is not records
        assert records[0].cost is None

    def test_idempotent(self, price_tiers):
        """Verify applying twice gives the same costs as applying once."""
        records = [
            ConsumptionRecord(date(2024, 2, 15), "ft-1", 100),
            ConsumptionRecord(date(2024, 5, 15), "ft-1", 200),
            ConsumptionRecord(date(2024, 5, 15), "ft-2", 10),
        ]
        once = ensure_consumption_costs(records, price_tiers)
        twice = ensure_consumption_costs(once, price_tiers)

        assert once == twice

    def test_preserves_order(self, price_tiers):
        """Verify output order matches input order."""
        records = [
            ConsumptionRecord(date(2024, 5, 15), "ft-1", 1),
            ConsumptionRecord(date(2024, 2, 15), "ft-1", 2),
        ]
        result = ensure_consumption_costs(records, price_tiers)

        assert [r.quantity for r in result] == [1, 2]


class TestWeightedAveragePrice:
    """Test quantity-weighted average unit price."""

    def test_weighted_average_example(self):
        """Verify 170 / 300 for two priced records."""
        records = [
            ConsumptionRecord(date(2024, 1, 1), "ft-1", 100, cost=50.0),
            ConsumptionRecord(date(2024, 1, 2), "ft-1", 200, cost=120.0),
        ]
        assert calculate_weighted_average_price(records) == pytest.approx(170 / 300)

    def test_differs_from_mean_of_unit_prices(self):
        """Verify the result is not the arithmetic mean of unit prices."""
        records = [
            ConsumptionRecord(date(2024, 1, 1), "ft-1", 100, cost=50.0),
            ConsumptionRecord(date(2024, 1, 2), "ft-1", 200, cost=120.0),
        ]
        mean_of_unit_prices = (0.5 + 0.6) / 2
        assert calculate_weighted_average_price(records) != pytest.approx(mean_of_unit_prices)

    def test_costless_quantity_dilutes(self):
        """Verify quantity of records without cost counts in the denominator."""
        records = [
            ConsumptionRecord(date(2024, 1, 1), "ft-1", 100, cost=50.0),
            ConsumptionRecord(date(2024, 1, 2), "ft-1", 100),
        ]
        assert calculate_weighted_average_price(records) == pytest.approx(0.25)

    def test_empty_input(self):
        """Verify empty input gives 0."""
        assert calculate_weighted_average_price([]) == 0.0

    def test_zero_quantity(self):
        """Verify zero total quantity gives 0 instead of dividing by zero."""
        records = [ConsumptionRecord(date(2024, 1, 1), "ft-1", 0, cost=10.0)]
        assert calculate_weighted_average_price(records) == 0.0


class TestGrouping:
    """Test grouping consumption by feed type."""

    def test_group_by_feed_type(self):
        """Verify 3 records of 2 feed types give 2 groups with correct totals."""
        records = [
            ConsumptionRecord(date(2024, 1, 1), "feed-1", 100, cost=50.0, feed_type_name="Wheat"),
            ConsumptionRecord(date(2024, 1, 2), "feed-1", 200, cost=120.0, feed_type_name="Wheat"),
            ConsumptionRecord(date(2024, 1, 3), "feed-2", 50, cost=60.0, feed_type_name="Soy"),
        ]
        totals = summarize_by_feed_type(records)

        assert len(totals) == 2
        wheat, soy = totals
        assert wheat.feed_type_id == "feed-1"
        assert wheat.feed_type_name == "Wheat"
        assert wheat.total_quantity == 300
        assert wheat.total_cost == pytest.approx(170.0)
        assert wheat.weighted_avg_price == pytest.approx(170 / 300)
        assert wheat.record_count == 2
        assert soy.total_quantity == 50
        assert soy.total_cost == pytest.approx(60.0)

    def test_group_consumption_custom_aggregate(self):
        """Verify custom key and aggregate callbacks, in first-seen order."""
        records = [
            ConsumptionRecord(date(2024, 2, 1), "feed-1", 10),
            ConsumptionRecord(date(2024, 1, 1), "feed-1", 20),
            ConsumptionRecord(date(2024, 2, 5), "feed-2", 30),
        ]
        result = group_consumption(
            records,
            lambda r: r.date.strftime("%Y-%m"),
            lambda key, items: (key, sum(i.quantity for i in items)),
        )

        assert result == [("2024-02", 40), ("2024-01", 20)]


class TestSupplierFromTier:
    """Test supplier attribution from the pricing tier."""

    def test_supplier_is_taken_from_tier(self):
        """Verify priced records inherit the supplier of their tier."""
        supplier = Relation("s-1", "Agrar Nord")
        tiers = [PriceTier("ft-1", 0.5, date(2024, 1, 1), supplier=supplier)]
        records = [ConsumptionRecord(date(2024, 2, 1), "ft-1", 100)]

        result = ensure_consumption_costs(records, tiers)

        assert result[0].supplier == supplier
        assert result[0].cost == pytest.approx(50.0)

    def test_existing_supplier_is_kept(self):
        """Verify a record's own supplier is not overwritten."""
        own = Relation("s-2", "Mühle Süd")
        tiers = [PriceTier("ft-1", 0.5, date(2024, 1, 1), supplier=Relation("s-1", "Agrar Nord"))]
        records = [ConsumptionRecord(date(2024, 2, 1), "ft-1", 100, supplier=own)]

        assert ensure_consumption_costs(records, tiers)[0].supplier == own

    def test_priced_record_passes_through(self):
        """Verify records with a positive cost get no supplier attached."""
        tiers = [PriceTier("ft-1", 0.5, date(2024, 1, 1), supplier=Relation("s-1", "Agrar Nord"))]
        records = [ConsumptionRecord(date(2024, 2, 1), "ft-1", 100, cost=42.0)]

        assert ensure_consumption_costs(records, tiers)[0].supplier is None

    def test_unresolved_record_has_no_supplier(self, price_tiers):
        """Verify records without a tier keep no supplier."""
        records = [ConsumptionRecord(date(2024, 2, 1), "ft-unknown", 100)]

        assert ensure_consumption_costs(records, price_tiers)[0].supplier is None
