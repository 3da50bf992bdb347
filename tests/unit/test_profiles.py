"""
Unit Tests - Customer Profiles and Insight Summary
"""
import pytest
import polars as pl

from sqinch import schema
from sqinch.analysis.affinity import generate_affinity_analysis
from sqinch.analysis.profiles import generate_customer_profiles
from sqinch.analysis.segments import generate_segment_analysis
from sqinch.analysis.summary import generate_insight_summary, summarize_profiles


class TestCustomerProfiles:
    """Tests for generate_customer_profiles"""

    def test_sample_profiles(self, sample_customers_df, enriched_products_df):
        """Test profile values against hand-computed figures"""
        profiles = generate_customer_profiles(sample_customers_df, enriched_products_df)

        assert profiles.columns == list(schema.PROFILE_SCHEMA)
        assert profiles.to_dicts() == [
            {
                "customerEmail": "ann@example.com",
                "ageRange": "25-34",
                "incomeTier": "High",
                "productsBought": 2,
                "totalSpent": 150.0,
                "avgSEI": 166.7,
                "revenueWeightedSEI": 148.1,
            },
            {
                "customerEmail": "bob@example.com",
                "ageRange": "35-44",
                "incomeTier": "Middle",
                "productsBought": 2,
                "totalSpent": 250.0,
                "avgSEI": 166.7,
                "revenueWeightedSEI": 133.3,
            },
            {
                "customerEmail": "cara@example.com",
                "ageRange": "45-54",
                "incomeTier": "High",
                "productsBought": 1,
                "totalSpent": 30.0,
                "avgSEI": 33.3,
                "revenueWeightedSEI": 33.3,
            },
        ]

    def test_customer_with_only_unknown_products_has_no_profile(self, sample_customers_df, enriched_products_df):
        profiles = generate_customer_profiles(sample_customers_df, enriched_products_df)

        assert "dan@example.com" not in profiles["customerEmail"].to_list()

    def test_equal_revenue_weighted_equals_average(self, customers_factory, enriched_products_df):
        """Test the weights cancel when every purchase has the same revenue"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "x@example.com", schema.PRODUCT_NAME: "Alpha Lamp", schema.REVENUE_GENERATED: 100},
            {schema.CUSTOMER_EMAIL: "x@example.com", schema.PRODUCT_NAME: "Gamma Vase", schema.REVENUE_GENERATED: 100},
        ])

        profile = generate_customer_profiles(customers, enriched_products_df).row(0, named=True)

        assert profile["revenueWeightedSEI"] == profile["avgSEI"] == 127.8

    def test_first_row_demographics_win(self, customers_factory, enriched_products_df):
        """Test conflicting demographics resolve to the first row in input order"""
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "x@example.com", schema.PRODUCT_NAME: "Beta Rug",
             schema.REVENUE_GENERATED: 10, schema.AGE_RANGE: "18-24", schema.INCOME_TIER: "Low"},
            {schema.CUSTOMER_EMAIL: "x@example.com", schema.PRODUCT_NAME: "Alpha Lamp",
             schema.REVENUE_GENERATED: 10, schema.AGE_RANGE: "55-64", schema.INCOME_TIER: "High"},
        ])

        profile = generate_customer_profiles(customers, enriched_products_df).row(0, named=True)

        assert profile["ageRange"] == "18-24"
        assert profile["incomeTier"] == "Low"

    def test_zero_spend_customer(self, customers_factory, enriched_products_df):
        customers = customers_factory([
            {schema.CUSTOMER_EMAIL: "x@example.com", schema.PRODUCT_NAME: "Alpha Lamp", schema.REVENUE_GENERATED: 0},
        ])

        profile = generate_customer_profiles(customers, enriched_products_df).row(0, named=True)

        assert profile["revenueWeightedSEI"] == 0.0
        assert profile["avgSEI"] == 222.2


class TestInsightSummary:
    """Tests for generate_insight_summary"""

    @pytest.fixture
    def summary(self, sample_customers_df, enriched_products_df):
        return generate_insight_summary(
            generate_segment_analysis(sample_customers_df, enriched_products_df),
            generate_affinity_analysis(sample_customers_df, enriched_products_df),
            generate_customer_profiles(sample_customers_df, enriched_products_df),
        )

    def test_segment_insights(self, summary):
        insights = summary.segment_insights

        assert insights.top_segment["segment"] == "Middle Income Suburban"
        assert insights.bottom_segment["segment"] == "High Income Urban"
        assert insights.highest_efficiency_segment["segment"] == "Middle Income Suburban"
        assert insights.total_segments == 2

    def test_affinity_insights(self, summary):
        insights = summary.affinity_insights

        assert insights.top_affinity["anchorProduct"] == "Alpha Lamp"
        assert insights.total_affinity_pairs == 1
        assert insights.high_efficiency_pairs == 1

    def test_customer_insights(self, summary):
        insights = summary.customer_insights

        assert insights.top_customer["customerEmail"] == "ann@example.com"
        assert insights.avg_customer_sei == pytest.approx((166.7 + 166.7 + 33.3) / 3)
        assert insights.multi_product_customers == 2
        assert insights.total_customers == 3

    def test_to_dict_keys(self, summary):
        data = summary.to_dict()

        assert set(data) == {"segmentInsights", "affinityInsights", "customerInsights"}
        assert data["affinityInsights"]["highEfficiencyPairs"] == 1
        assert data["customerInsights"]["totalCustomers"] == 3

    def test_high_efficiency_threshold(self, sample_customers_df, enriched_products_df):
        affinity = generate_affinity_analysis(sample_customers_df, enriched_products_df)
        empty_segments = pl.DataFrame(schema=schema.SEGMENT_SCHEMA)
        empty_profiles = pl.DataFrame(schema=schema.PROFILE_SCHEMA)

        summary = generate_insight_summary(
            empty_segments, affinity, empty_profiles, high_efficiency_threshold=170.0
        )

        assert summary.affinity_insights.high_efficiency_pairs == 0

    def test_empty_tables(self):
        """Test empty tables summarize to nulls and zeros"""
        summary = generate_insight_summary(
            pl.DataFrame(schema=schema.SEGMENT_SCHEMA),
            pl.DataFrame(schema=schema.AFFINITY_SCHEMA),
            pl.DataFrame(schema=schema.PROFILE_SCHEMA),
        )

        assert summary.segment_insights.top_segment is None
        assert summary.segment_insights.highest_efficiency_segment is None
        assert summary.affinity_insights.top_affinity is None
        assert summary.customer_insights.avg_customer_sei == 0.0
        assert summarize_profiles(pl.DataFrame(schema=schema.PROFILE_SCHEMA)).total_customers == 0
