"""
Space Efficiency Analysis Module
"""
from .affinity import generate_affinity_analysis
from .joins import JoinMiss, join_products
from .metrics import ProductMetricsEngine, enrich_products
from .pipeline import AnalysisData, AnalysisPipeline, AnalysisResult, run_analysis
from .profiles import generate_customer_profiles
from .segments import (
    ColumnSegmentStrategy,
    IncomeLocationStrategy,
    SegmentKeyStrategy,
    generate_segment_analysis,
)
from .summary import InsightSummary, generate_insight_summary

__all__ = [
    "generate_affinity_analysis",
    "JoinMiss",
    "join_products",
    "ProductMetricsEngine",
    "enrich_products",
    "AnalysisData",
    "AnalysisPipeline",
    "AnalysisResult",
    "run_analysis",
    "generate_customer_profiles",
    "ColumnSegmentStrategy",
    "IncomeLocationStrategy",
    "SegmentKeyStrategy",
    "generate_segment_analysis",
    "InsightSummary",
    "generate_insight_summary",
]
