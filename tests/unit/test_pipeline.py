"""
Unit Tests - Analysis Pipeline and Export
"""
from datetime import date

import pytest
import polars as pl
from polars.testing import assert_frame_equal

from sqinch import schema
from sqinch.analysis.joins import join_products
from sqinch.analysis.pipeline import AnalysisPipeline, run_analysis
from sqinch.config import AnalysisSettings, Settings
from sqinch.config.settings import InsightSettings
from sqinch.exceptions import DataError
from sqinch.schema import AnalysisView
from sqinch.serving.export import export_filename, export_table, read_table, rows_to_table

PRODUCT_HEADER = "Product Name,Product Sales Revenue,Units Sold,Square Inches,Page Number,Catalog Price"


class TestAnalysisPipeline:
    """Tests for AnalysisPipeline"""

    def test_successful_run(self, products_csv, customers_csv, test_settings):
        result = run_analysis(products_csv, customers_csv, settings=test_settings)

        assert result.success
        assert result.error is None
        assert result.duration_seconds >= 0
        data = result.data
        assert len(data.product_metrics) == 3
        assert len(data.segment_analysis) == 2
        assert len(data.affinity_analysis) == 1
        assert len(data.customer_profiles) == 3

    def test_unknown_product_does_not_abort(self, products_csv, customers_csv, test_settings):
        """Test unmatched purchase rows are reported, not fatal"""
        result = run_analysis(products_csv, customers_csv, settings=test_settings)

        assert [m.product_name for m in result.data.join_misses] == ["Unknown Chair"]
        diagnostics = result.to_dict()["data"]["diagnostics"]
        assert diagnostics["unmatchedPurchaseRows"] == 1
        assert diagnostics["unmatchedProducts"] == ["Unknown Chair"]

    def test_to_dict_shape(self, products_csv, customers_csv, test_settings):
        payload = run_analysis(products_csv, customers_csv, settings=test_settings).to_dict()

        assert payload["success"] is True
        assert set(payload["data"]) == {
            "productMetrics",
            "segmentAnalysis",
            "affinityAnalysis",
            "customerProfiles",
            "insightSummaries",
            "diagnostics",
        }
        assert payload["data"]["segmentAnalysis"][0]["segment"] == "Middle Income Suburban"

    def test_empty_catalog_fails_cleanly(self, customers_csv, test_settings):
        """Test a header-only catalog gives a failure result, not a crash"""
        result = run_analysis(PRODUCT_HEADER + "\n", customers_csv, settings=test_settings)

        assert not result.success
        assert result.data is None
        assert "no valid product rows" in result.error
        assert result.to_dict() == {"success": False, "error": result.error}

    def test_empty_file_fails_cleanly(self, customers_csv, test_settings):
        result = run_analysis("", customers_csv, settings=test_settings)

        assert not result.success
        assert "empty" in result.error

    def test_duplicate_product_names_fail(self, customers_csv, test_settings):
        products = f"{PRODUCT_HEADER}\nLamp,100,1,10,1,10\nLamp,200,1,10,1,10\n"

        result = run_analysis(products, customers_csv, settings=test_settings)

        assert not result.success
        assert "duplicate" in result.error

    def test_unexpected_error_is_contained(self, products_csv, customers_csv, test_settings, monkeypatch):
        """Test non-data failures become a generic failure result"""
        pipeline = AnalysisPipeline(test_settings)

        def boom(products):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(pipeline.metrics_engine, "enrich", boom)

        result = pipeline.run(products_csv, customers_csv)

        assert not result.success
        assert "disk on fire" not in result.error

    def test_purchases_joined_once(self, products_csv, customers_csv, test_settings, monkeypatch):
        """Test one product join feeds both the segment and profile analyses"""
        calls = []

        def counting_join(customers, products):
            calls.append(1)
            return join_products(customers, products)

        monkeypatch.setattr("sqinch.analysis.pipeline.join_products", counting_join)
        monkeypatch.setattr("sqinch.analysis.segments.join_products", counting_join)
        monkeypatch.setattr("sqinch.analysis.profiles.join_products", counting_join)

        data = AnalysisPipeline(test_settings).analyze(products_csv, customers_csv)

        assert len(calls) == 1
        assert len(data.segment_analysis) == 2
        assert len(data.customer_profiles) == 3

    def test_analyze_raises_data_error(self, customers_csv, test_settings):
        with pytest.raises(DataError):
            AnalysisPipeline(test_settings).analyze("", customers_csv)

    def test_configured_segment_columns(self, products_csv, customers_csv):
        settings = Settings(
            app_env="testing",
            analysis=AnalysisSettings(segment_columns=[schema.AGE_RANGE]),
            insights=InsightSettings(enabled=False),
        )

        result = run_analysis(products_csv, customers_csv, settings=settings)

        assert sorted(result.data.segment_analysis["segment"].to_list()) == ["25-34", "35-44", "45-54"]

    def test_table_lookup(self, products_csv, customers_csv, test_settings):
        data = run_analysis(products_csv, customers_csv, settings=test_settings).data

        assert data.table(AnalysisView.AFFINITY) is data.affinity_analysis
        assert data.table("profiles") is data.customer_profiles


class TestExport:
    """Tests for CSV export"""

    @pytest.fixture
    def data(self, products_csv, customers_csv, test_settings):
        return run_analysis(products_csv, customers_csv, settings=test_settings).data

    @pytest.mark.parametrize("view", list(AnalysisView))
    def test_round_trip(self, data, view):
        """Test exported tables parse back to the same rows"""
        table = data.table(view)

        restored = read_table(export_table(table, view), view)

        assert_frame_equal(restored, table.select(list(schema.VIEW_SCHEMAS[view])))

    def test_header_order(self, data):
        text = export_table(data.segment_analysis, AnalysisView.SEGMENT)

        assert text.splitlines()[0] == "segment,customers,totalRevenue,weightedAvgSEI,spaceConsumed,revenuePerSqIn"

    def test_rows_to_table(self, data):
        rows = data.customer_profiles.to_dicts()

        table = rows_to_table(rows, AnalysisView.PROFILES)

        assert_frame_equal(table, data.customer_profiles)

    def test_rows_to_table_empty(self):
        table = rows_to_table([], AnalysisView.AFFINITY)

        assert table.is_empty()
        assert table.columns == list(schema.AFFINITY_SCHEMA)

    def test_export_filename(self):
        assert export_filename(AnalysisView.SEGMENT, date(2025, 1, 31)) == "sqinch_segment_2025-01-31.csv"
