"""
Insight Summarizer

Pure selection over the sorted analysis tables: top and bottom rows,
counts and one mean. The result is the input contract for narrative
generation.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import polars as pl

Row = Dict[str, Any]


def _first(df: pl.DataFrame) -> Optional[Row]:
    return df.row(0, named=True) if df.height else None


def _last(df: pl.DataFrame) -> Optional[Row]:
    return df.row(df.height - 1, named=True) if df.height else None


@dataclass(frozen=True)
class SegmentInsights:
    top_segment: Optional[Row]
    bottom_segment: Optional[Row]
    highest_efficiency_segment: Optional[Row]
    total_segments: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topSegment": self.top_segment,
            "bottomSegment": self.bottom_segment,
            "highestEfficiencySegment": self.highest_efficiency_segment,
            "totalSegments": self.total_segments,
        }


@dataclass(frozen=True)
class AffinityInsights:
    top_affinity: Optional[Row]
    total_affinity_pairs: int
    high_efficiency_pairs: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topAffinity": self.top_affinity,
            "totalAffinityPairs": self.total_affinity_pairs,
            "highEfficiencyPairs": self.high_efficiency_pairs,
        }


@dataclass(frozen=True)
class CustomerInsights:
    top_customer: Optional[Row]
    avg_customer_sei: float
    multi_product_customers: int
    total_customers: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topCustomer": self.top_customer,
            "avgCustomerSEI": self.avg_customer_sei,
            "multiProductCustomers": self.multi_product_customers,
            "totalCustomers": self.total_customers,
        }


@dataclass(frozen=True)
class InsightSummary:
    """Digest of the segment, affinity and profile tables"""
    segment_insights: SegmentInsights
    affinity_insights: AffinityInsights
    customer_insights: CustomerInsights

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segmentInsights": self.segment_insights.to_dict(),
            "affinityInsights": self.affinity_insights.to_dict(),
            "customerInsights": self.customer_insights.to_dict(),
        }


def summarize_segments(segments: pl.DataFrame) -> SegmentInsights:
    highest = None
    if segments.height:
        # arg_max returns the first maximum, so ties go to the earlier row
        highest = segments.row(segments["weightedAvgSEI"].arg_max(), named=True)

    return SegmentInsights(
        top_segment=_first(segments),
        bottom_segment=_last(segments),
        highest_efficiency_segment=highest,
        total_segments=segments.height,
    )


def summarize_affinity(affinity: pl.DataFrame, high_efficiency_threshold: float = 150.0) -> AffinityInsights:
    return AffinityInsights(
        top_affinity=_first(affinity),
        total_affinity_pairs=affinity.height,
        high_efficiency_pairs=affinity.filter(pl.col("combinedEfficiency") > high_efficiency_threshold).height,
    )


def summarize_profiles(profiles: pl.DataFrame) -> CustomerInsights:
    # Mean of the already-rounded per-customer values
    avg_sei = profiles["avgSEI"].mean() if profiles.height else 0.0

    return CustomerInsights(
        top_customer=_first(profiles),
        avg_customer_sei=float(avg_sei),
        multi_product_customers=profiles.filter(pl.col("productsBought") > 1).height,
        total_customers=profiles.height,
    )


def generate_insight_summary(
    segments: pl.DataFrame,
    affinity: pl.DataFrame,
    profiles: pl.DataFrame,
    high_efficiency_threshold: float = 150.0,
) -> InsightSummary:
    """
    Extract the headline rows and counts from the three derived tables.

    Args:
        segments: Segment analysis, sorted by revenue per square inch
        affinity: Affinity analysis, sorted by combined efficiency
        profiles: Customer profiles, sorted by revenue-weighted SEI
        high_efficiency_threshold: Combined efficiency a pair must exceed
            to count as high-efficiency

    Returns:
        InsightSummary
    """
    return InsightSummary(
        segment_insights=summarize_segments(segments),
        affinity_insights=summarize_affinity(affinity, high_efficiency_threshold),
        customer_insights=summarize_profiles(profiles),
    )
