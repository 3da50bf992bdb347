"""
Analysis Pipeline

Orchestrates one analysis run: parse both input files, validate them,
score products, then derive the segment, affinity and profile tables and
the insight summary.

``run_analysis`` is the entry point for the presentation layer. It never
raises: a run either succeeds with all tables or fails with one message.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import polars as pl
import structlog

from sqinch.analysis.affinity import generate_affinity_analysis
from sqinch.analysis.joins import JoinMiss, join_products
from sqinch.analysis.metrics import ProductMetricsEngine
from sqinch.analysis.profiles import generate_customer_profiles
from sqinch.analysis.segments import generate_segment_analysis, strategy_from_settings
from sqinch.analysis.summary import InsightSummary, generate_insight_summary
from sqinch.config import Settings, get_settings
from sqinch.exceptions import DataError
from sqinch.ingestion import CleaningStats, load_datasets
from sqinch.quality import create_customers_validator, create_products_validator
from sqinch.schema import AnalysisView

logger = structlog.get_logger(__name__)


@dataclass
class AnalysisData:
    """The four analysis tables of a successful run plus run diagnostics"""
    product_metrics: pl.DataFrame
    segment_analysis: pl.DataFrame
    affinity_analysis: pl.DataFrame
    customer_profiles: pl.DataFrame
    insight_summary: InsightSummary
    join_misses: List[JoinMiss] = field(default_factory=list)
    product_stats: Optional[CleaningStats] = None
    customer_stats: Optional[CleaningStats] = None

    def table(self, view: AnalysisView) -> pl.DataFrame:
        """Table backing a result view"""
        return {
            AnalysisView.FOUNDATIONAL: self.product_metrics,
            AnalysisView.SEGMENT: self.segment_analysis,
            AnalysisView.AFFINITY: self.affinity_analysis,
            AnalysisView.PROFILES: self.customer_profiles,
        }[AnalysisView(view)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productMetrics": self.product_metrics.to_dicts(),
            "segmentAnalysis": self.segment_analysis.to_dicts(),
            "affinityAnalysis": self.affinity_analysis.to_dicts(),
            "customerProfiles": self.customer_profiles.to_dicts(),
            "insightSummaries": self.insight_summary.to_dict(),
            "diagnostics": {
                "unmatchedPurchaseRows": len(self.join_misses),
                "unmatchedProducts": sorted({m.product_name for m in self.join_misses}),
                "productRowsDropped": self.product_stats.rows_dropped if self.product_stats else 0,
                "customerRowsDropped": self.customer_stats.rows_dropped if self.customer_stats else 0,
            },
        }


@dataclass
class AnalysisResult:
    """Result of one pipeline run"""
    success: bool
    started_at: datetime
    completed_at: datetime
    data: Optional[AnalysisData] = None
    error: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data.to_dict()}
        return {"success": False, "error": self.error}


class AnalysisPipeline:
    """
    Space efficiency analysis orchestrator.

    Example:
        pipeline = AnalysisPipeline()
        result = pipeline.run(product_csv, customer_csv)
        if result.success:
            result.data.segment_analysis
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.metrics_engine = ProductMetricsEngine()

    def analyze(self, product_text: str, customer_text: str) -> AnalysisData:
        """
        Run every stage and return the analysis tables.

        Raises:
            DataError: If the inputs cannot produce a complete result
        """
        analysis = self.settings.analysis

        # Step 1: Parse and clean
        datasets = load_datasets(product_text, customer_text)

        # Step 2: Validate
        create_products_validator().validate(datasets.products).raise_for_errors("product")
        create_customers_validator().validate(datasets.customers).raise_for_errors("customer")

        # Step 3: Score products
        products = self.metrics_engine.enrich(datasets.products)
        customers = datasets.customers

        # Step 4: Derive the customer-side analyses
        join = join_products(customers, products)
        segments = generate_segment_analysis(
            customers,
            products,
            strategy=strategy_from_settings(analysis, customers),
            joined=join.joined,
        )
        affinity = generate_affinity_analysis(
            customers,
            products,
            max_purchases_per_customer=analysis.max_purchases_per_customer,
        )
        profiles = generate_customer_profiles(customers, products, joined=join.joined)

        # Step 5: Summarize
        summary = generate_insight_summary(
            segments,
            affinity,
            profiles,
            high_efficiency_threshold=analysis.high_efficiency_threshold,
        )

        return AnalysisData(
            product_metrics=products,
            segment_analysis=segments,
            affinity_analysis=affinity,
            customer_profiles=profiles,
            insight_summary=summary,
            join_misses=join.misses,
            product_stats=datasets.product_stats,
            customer_stats=datasets.customer_stats,
        )

    def run(self, product_text: str, customer_text: str) -> AnalysisResult:
        """Run the analysis, converting every failure into a failed result"""
        started_at = datetime.utcnow()
        logger.info("Starting analysis run")

        try:
            data = self.analyze(product_text, customer_text)
        except DataError as e:
            completed_at = datetime.utcnow()
            logger.warning("Analysis run rejected input", error=e.message, details=e.details)
            return AnalysisResult(
                success=False,
                started_at=started_at,
                completed_at=completed_at,
                error=e.message,
            )
        except Exception:
            completed_at = datetime.utcnow()
            logger.exception("Analysis run failed unexpectedly")
            return AnalysisResult(
                success=False,
                started_at=started_at,
                completed_at=completed_at,
                error="Unexpected error while analysing the files",
            )

        result = AnalysisResult(
            success=True,
            started_at=started_at,
            completed_at=datetime.utcnow(),
            data=data,
        )

        logger.info(
            "Analysis run complete",
            products=len(data.product_metrics),
            segments=len(data.segment_analysis),
            affinity_pairs=len(data.affinity_analysis),
            customers=len(data.customer_profiles),
            unmatched_rows=len(data.join_misses),
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result


def run_analysis(
    product_text: str,
    customer_text: str,
    settings: Optional[Settings] = None,
) -> AnalysisResult:
    """
    Convenience function to run the full analysis.

    Args:
        product_text: Catalog file contents
        customer_text: Purchase-log file contents
        settings: Optional settings override

    Returns:
        AnalysisResult (never raises)
    """
    return AnalysisPipeline(settings).run(product_text, customer_text)
