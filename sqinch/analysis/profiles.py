"""
Customer Profiler

Summarises each customer's purchase history as an efficiency profile.
"""

from typing import Optional

import polars as pl
import structlog

from sqinch import schema
from sqinch.analysis.joins import join_products

logger = structlog.get_logger(__name__)


def generate_customer_profiles(
    customers: pl.DataFrame,
    products: pl.DataFrame,
    joined: Optional[pl.DataFrame] = None,
) -> pl.DataFrame:
    """
    Build one profile per customer email.

    productsBought is the matched row count, avgSEI the plain mean of the
    purchased products' SEI and revenueWeightedSEI the revenue-weighted
    mean. Age range and income tier come from the customer's first row in
    input order. Sorted by revenueWeightedSEI, descending.
    """
    if joined is None:
        joined = join_products(customers, products).joined

    profiles = (
        joined.group_by(schema.CUSTOMER_EMAIL, maintain_order=True)
        .agg([
            pl.col(schema.AGE_RANGE).first().alias("ageRange"),
            pl.col(schema.INCOME_TIER).first().alias("incomeTier"),
            pl.len().alias("productsBought"),
            pl.col(schema.REVENUE_GENERATED).sum().alias("totalSpent"),
            pl.col(schema.SEI).mean().alias("avgSEI"),
            (pl.col(schema.REVENUE_GENERATED) * pl.col(schema.SEI)).sum().alias("_weighted"),
        ])
        .with_columns([
            pl.col(schema.CUSTOMER_EMAIL).alias("customerEmail"),
            pl.col("avgSEI").round(1),
            pl.when(pl.col("totalSpent") != 0)
            .then(pl.col("_weighted") / pl.col("totalSpent"))
            .otherwise(0.0)
            .round(1)
            .alias("revenueWeightedSEI"),
        ])
        .select([pl.col(c).cast(t) for c, t in schema.PROFILE_SCHEMA.items()])
        .sort("revenueWeightedSEI", descending=True, maintain_order=True)
    )

    logger.info("Customer profiles generated", customers=len(profiles))
    return profiles
