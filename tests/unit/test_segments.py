"""
Unit Tests - Segment Analysis
"""
import pytest
import polars as pl

from sqinch import schema
from sqinch.analysis.joins import join_products
from sqinch.analysis.segments import (
    ColumnSegmentStrategy,
    IncomeLocationStrategy,
    detect_categorical_columns,
    generate_segment_analysis,
    strategy_from_settings,
)
from sqinch.config import AnalysisSettings
from sqinch.exceptions import DataError


class TestJoinProducts:
    """Tests for the customer-to-product join"""

    def test_unknown_product_is_a_miss(self, sample_customers_df, enriched_products_df):
        """Test rows for products outside the catalog are dropped and reported"""
        result = join_products(sample_customers_df, enriched_products_df)

        assert len(result.joined) == 5
        assert len(result.misses) == 1
        miss = result.misses[0]
        assert miss.row == 5
        assert miss.customer_email == "dan@example.com"
        assert miss.product_name == "Unknown Chair"

    def test_preserves_input_order(self, sample_customers_df, enriched_products_df):
        """Test joined rows keep the purchase-log order"""
        joined = join_products(sample_customers_df, enriched_products_df).joined

        assert joined["_row"].to_list() == [0, 1, 2, 3, 4]


class TestSegmentAnalysis:
    """Tests for generate_segment_analysis"""

    def test_income_location_segments(self, sample_customers_df, enriched_products_df):
        """Test segment values against hand-computed figures"""
        segments = generate_segment_analysis(sample_customers_df, enriched_products_df)

        assert segments.columns == list(schema.SEGMENT_SCHEMA)
        assert segments["segment"].to_list() == ["Middle Income Suburban", "High Income Urban"]

        middle, high = segments.to_dicts()
        assert middle["customers"] == 1
        assert middle["totalRevenue"] == 250.0
        assert middle["spaceConsumed"] == 30.0
        assert middle["weightedAvgSEI"] == 133.3
        assert middle["revenuePerSqIn"] == 8.33

        assert high["customers"] == 2
        assert high["totalRevenue"] == 180.0
        assert high["spaceConsumed"] == 40.0
        assert high["weightedAvgSEI"] == 129.0
        assert high["revenuePerSqIn"] == 4.5

    def test_unknown_products_do_not_form_segments(self, sample_customers_df, enriched_products_df):
        """Test dan's only row references an unknown product"""
        segments = generate_segment_analysis(sample_customers_df, enriched_products_df)

        assert "Low Income Rural" not in segments["segment"].to_list()

    def test_revenue_reconstruction(self, sample_customers_df, enriched_products_df):
        """Test revenue per square inch times space approximates revenue"""
        segments = generate_segment_analysis(sample_customers_df, enriched_products_df)

        for row in segments.iter_rows(named=True):
            assert row["revenuePerSqIn"] * row["spaceConsumed"] == pytest.approx(row["totalRevenue"], abs=0.005 * row["spaceConsumed"])

    def test_missing_demographics_become_unknown(self, customers_factory, enriched_products_df):
        """Test null income tier or location"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "a@example.com", schema.PRODUCT_NAME: "Alpha Lamp",
             schema.REVENUE_GENERATED: 10, schema.INCOME_TIER: None, schema.LOCATION: "Rural"},
        ])

        segments = generate_segment_analysis(customers, enriched_products_df)

        assert segments["segment"].to_list() == ["Unknown Income Rural"]

    def test_zero_revenue_segment(self, customers_factory, enriched_products_df):
        """Test weighted SEI of a segment without revenue is zero"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "a@example.com", schema.PRODUCT_NAME: "Alpha Lamp", schema.REVENUE_GENERATED: 0},
        ])

        segments = generate_segment_analysis(customers, enriched_products_df)

        assert segments["weightedAvgSEI"].to_list() == [0.0]
        assert segments["revenuePerSqIn"].to_list() == [0.0]

    def test_zero_space_segment(self, customers_factory, enriched_products_df):
        """Test a segment that consumed no space is rejected"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "a@example.com", schema.PRODUCT_NAME: "Alpha Lamp",
             schema.UNITS_PURCHASED: 0, schema.REVENUE_GENERATED: 10},
        ])

        with pytest.raises(DataError, match="zero space"):
            generate_segment_analysis(customers, enriched_products_df)

    def test_ties_keep_first_appearance(self, customers_factory, enriched_products_df):
        """Test equal revenue density keeps input order"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "a@example.com", schema.PRODUCT_NAME: "Alpha Lamp",
             schema.REVENUE_GENERATED: 10, schema.LOCATION: "Rural"},
            {schema.CUSTOMER_EMAIL: "b@example.com", schema.PRODUCT_NAME: "Beta Rug",
             schema.REVENUE_GENERATED: 10, schema.LOCATION: "Urban"},
        ])

        segments = generate_segment_analysis(customers, enriched_products_df)

        assert segments["segment"].to_list() == ["Middle Income Rural", "Middle Income Urban"]

    def test_column_strategy(self, sample_customers_df, enriched_products_df):
        """Test segmentation by an arbitrary column list"""
        strategy = ColumnSegmentStrategy([schema.AGE_RANGE])

        segments = generate_segment_analysis(sample_customers_df, enriched_products_df, strategy=strategy)

        assert sorted(segments["segment"].to_list()) == ["25-34", "35-44", "45-54"]

    def test_column_strategy_missing_column(self, sample_customers_df, enriched_products_df):
        """Test an unknown segment column is a data error"""
        strategy = ColumnSegmentStrategy(["Loyalty Tier"])

        with pytest.raises(DataError, match="Loyalty Tier"):
            generate_segment_analysis(sample_customers_df, enriched_products_df, strategy=strategy)


class TestSegmentStrategies:
    """Tests for segment key strategy selection"""

    def test_default_strategy(self, sample_customers_df):
        strategy = strategy_from_settings(AnalysisSettings(), sample_customers_df)

        assert isinstance(strategy, IncomeLocationStrategy)
        assert strategy.columns == [schema.INCOME_TIER, schema.LOCATION]

    def test_configured_columns(self, sample_customers_df):
        settings = AnalysisSettings(segment_columns=[schema.AGE_RANGE, schema.LOCATION])

        strategy = strategy_from_settings(settings, sample_customers_df)

        assert isinstance(strategy, ColumnSegmentStrategy)
        assert strategy.columns == [schema.AGE_RANGE, schema.LOCATION]

    def test_auto_detection(self, sample_customers_df):
        """Test categorical detection excludes identifiers and measures"""
        settings = AnalysisSettings(segment_columns=["auto"])

        strategy = strategy_from_settings(settings, sample_customers_df)

        assert strategy.columns == [schema.AGE_RANGE, schema.INCOME_TIER, schema.LOCATION]

    def test_detect_respects_cardinality(self):
        df = pl.DataFrame({
            "Region": ["N", "S", "N", "E"],
            "Constant": ["x", "x", "x", "x"],
            "Code": ["a", "b", "c", "d"],
        })

        assert detect_categorical_columns(df, max_cardinality=3) == ["Region"]

    def test_column_strategy_requires_columns(self):
        with pytest.raises(ValueError):
            ColumnSegmentStrategy([])

    def test_column_key_joins_values(self):
        df = pl.DataFrame({"Age Range": ["25-34", None], "Location": ["Urban", "Rural"]})

        keys = df.select(ColumnSegmentStrategy(["Age Range", "Location"]).key_expr())

        assert keys.to_series().to_list() == ["25-34 | Urban", "Unknown | Rural"]
