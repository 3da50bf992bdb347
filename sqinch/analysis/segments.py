"""
Segment Aggregator

Groups purchase rows into demographic segments and measures how
efficiently each segment's purchases use catalog space.

The segment key is produced by a pluggable ``SegmentKeyStrategy``. The
default reproduces the "<Income Tier> Income <Location>" labels; a column
strategy groups by any list of categorical columns.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import polars as pl
import structlog

from sqinch import schema
from sqinch.analysis.joins import join_products
from sqinch.config import AnalysisSettings
from sqinch.exceptions import DataError

logger = structlog.get_logger(__name__)

SEGMENT = "segment"
UNKNOWN = "Unknown"
AUTO = "auto"

# Identifiers and measures are never segment dimensions
NON_CATEGORICAL = {
    schema.CUSTOMER_EMAIL,
    schema.PRODUCT_NAME,
    schema.UNITS_PURCHASED,
    schema.REVENUE_GENERATED,
}


class SegmentKeyStrategy(ABC):
    """Builds the segment label for each purchase row"""

    @property
    @abstractmethod
    def columns(self) -> List[str]:
        """Customer columns the key is built from"""

    @abstractmethod
    def key_expr(self) -> pl.Expr:
        """Expression evaluating to the segment label"""

    def validate(self, customers: pl.DataFrame) -> None:
        missing = [c for c in self.columns if c not in customers.columns]
        if missing:
            raise DataError(
                f"Segment columns not found in customer file: {', '.join(missing)}",
                details={"missing_columns": missing},
            )


class IncomeLocationStrategy(SegmentKeyStrategy):
    """Fixed "<Income Tier> Income <Location>" segmentation"""

    @property
    def columns(self) -> List[str]:
        return [schema.INCOME_TIER, schema.LOCATION]

    def key_expr(self) -> pl.Expr:
        return pl.format(
            "{} Income {}",
            pl.col(schema.INCOME_TIER).fill_null(UNKNOWN),
            pl.col(schema.LOCATION).fill_null(UNKNOWN),
        )


class ColumnSegmentStrategy(SegmentKeyStrategy):
    """Segments keyed by the values of an arbitrary list of columns"""

    def __init__(self, columns: Sequence[str], separator: str = " | "):
        if not columns:
            raise ValueError("At least one segment column is required")
        self._columns = list(columns)
        self.separator = separator

    @property
    def columns(self) -> List[str]:
        return self._columns

    def key_expr(self) -> pl.Expr:
        return pl.concat_str(
            [pl.col(c).cast(pl.Utf8).fill_null(UNKNOWN) for c in self._columns],
            separator=self.separator,
        )


def detect_categorical_columns(customers: pl.DataFrame, max_cardinality: int = 12) -> List[str]:
    """
    Text columns usable as segment dimensions.

    A column qualifies when it is not an identifier or measure and has
    between 2 and ``max_cardinality`` distinct non-null values. Columns are
    returned in file order.
    """
    detected = []
    for col, dtype in zip(customers.columns, customers.dtypes):
        if col in NON_CATEGORICAL or dtype != pl.Utf8:
            continue
        distinct = customers[col].drop_nulls().n_unique()
        if 2 <= distinct <= max_cardinality:
            detected.append(col)
    return detected


def strategy_from_settings(settings: AnalysisSettings, customers: pl.DataFrame) -> SegmentKeyStrategy:
    """Pick the segment key strategy configured for this run"""
    columns = settings.segment_columns
    if not columns:
        return IncomeLocationStrategy()

    if [c.lower() for c in columns] == [AUTO]:
        detected = detect_categorical_columns(customers, settings.max_segment_cardinality)
        logger.info("Detected segment columns", columns=detected)
        if not detected:
            return IncomeLocationStrategy()
        return ColumnSegmentStrategy(detected)

    return ColumnSegmentStrategy(columns)


def generate_segment_analysis(
    customers: pl.DataFrame,
    products: pl.DataFrame,
    strategy: Optional[SegmentKeyStrategy] = None,
    joined: Optional[pl.DataFrame] = None,
) -> pl.DataFrame:
    """
    Aggregate purchases by segment.

    Per segment: unique customers, total revenue, space consumed
    (units x product area), revenue-weighted SEI and revenue per square
    inch of space consumed. Sorted by revenue per square inch, descending;
    ties keep first-appearance order.

    ``joined`` is the matched frame from ``join_products`` when the caller
    already has it.

    Raises:
        DataError: If a segment consumed no space
    """
    strategy = strategy or IncomeLocationStrategy()
    strategy.validate(customers)

    if joined is None:
        joined = join_products(customers, products).joined

    segments = (
        joined.with_columns(strategy.key_expr().alias(SEGMENT))
        .group_by(SEGMENT, maintain_order=True)
        .agg([
            pl.col(schema.CUSTOMER_EMAIL).n_unique().alias("customers"),
            pl.col(schema.REVENUE_GENERATED).sum().alias("totalRevenue"),
            (pl.col(schema.UNITS_PURCHASED) * pl.col(schema.SQUARE_INCHES)).sum().alias("spaceConsumed"),
            (pl.col(schema.REVENUE_GENERATED) * pl.col(schema.SEI)).sum().alias("_weighted"),
        ])
    )

    empty_space = segments.filter(pl.col("spaceConsumed") == 0)[SEGMENT].to_list()
    if empty_space:
        raise DataError(
            f"Segments with zero space consumed: {', '.join(empty_space)}",
            details={"segments": empty_space},
        )

    segments = segments.with_columns([
        pl.when(pl.col("totalRevenue") != 0)
        .then(pl.col("_weighted") / pl.col("totalRevenue"))
        .otherwise(0.0)
        .round(1)
        .alias("weightedAvgSEI"),
        (pl.col("totalRevenue") / pl.col("spaceConsumed")).round(2).alias("revenuePerSqIn"),
    ])

    segments = (
        segments.select([pl.col(c).cast(t) for c, t in schema.SEGMENT_SCHEMA.items()])
        .sort("revenuePerSqIn", descending=True, maintain_order=True)
    )

    logger.info("Segment analysis generated", segments=len(segments), key_columns=strategy.columns)
    return segments
