"""
Affinity Analyzer

Finds products bought by the same customer and scores each pair by the
mean space efficiency of its two products.

Pair enumeration is quadratic in a customer's purchase count, so only the
first ``max_purchases_per_customer`` rows of any customer are paired.
"""

import polars as pl
import structlog

from sqinch import schema

logger = structlog.get_logger(__name__)

ANCHOR = "anchorProduct"
BOUGHT_WITH = "boughtWithProduct"
_SEQ = "_seq"
_OTHER = "_other"
_FIRST = "_first_row"


def enumerate_pairs(customers: pl.DataFrame, max_purchases_per_customer: int = 200) -> pl.DataFrame:
    """
    Every unordered product pair co-purchased by a customer.

    For a customer with k rows this yields one candidate per row pair
    (i < j), skipping pairs of the same product name. Names are ordered so
    that (A, B) and (B, A) become the same pair: the lexicographically
    smaller name is the anchor. Customers are taken in order of first
    appearance and each customer's pairs in row order.

    Returns:
        DataFrame with customer email, anchorProduct, boughtWithProduct,
        one row per (customer, row pair)
    """
    email, name = schema.CUSTOMER_EMAIL, schema.PRODUCT_NAME

    rows = (
        customers.select([email, name])
        .with_row_index("_row")
        .with_columns([
            pl.int_range(pl.len()).over(email).alias(_SEQ),
            pl.col("_row").min().over(email).alias(_FIRST),
        ])
    )

    capped = rows.filter(pl.col(_SEQ) >= max_purchases_per_customer)[email].unique(maintain_order=True)
    if len(capped):
        logger.warning(
            "Purchase count above pairing cap; extra rows ignored for affinity",
            customers=len(capped),
            cap=max_purchases_per_customer,
        )
        rows = rows.filter(pl.col(_SEQ) < max_purchases_per_customer)

    left, right = pl.col(name), pl.col(name + _OTHER)
    return (
        rows.join(rows, on=email, suffix=_OTHER)
        .filter((pl.col(_SEQ) < pl.col(_SEQ + _OTHER)) & (left != right))
        .sort([_FIRST, _SEQ, _SEQ + _OTHER])
        .select([
            pl.col(email),
            pl.when(left < right).then(left).otherwise(right).alias(ANCHOR),
            pl.when(left < right).then(right).otherwise(left).alias(BOUGHT_WITH),
        ])
    )


def generate_affinity_analysis(
    customers: pl.DataFrame,
    products: pl.DataFrame,
    max_purchases_per_customer: int = 200,
) -> pl.DataFrame:
    """
    Aggregate co-purchase pairs across customers.

    coPurchases counts (customer, row pair) occurrences. Pairs involving a
    product missing from the catalog are dropped. SEIs and the combined
    (mean) efficiency are rounded to one decimal; rows are sorted by
    combined efficiency, descending.
    """
    pairs = (
        enumerate_pairs(customers, max_purchases_per_customer)
        .group_by([ANCHOR, BOUGHT_WITH], maintain_order=True)
        .agg(pl.len().alias("coPurchases"))
        .with_row_index("_pair")
    )

    sei = products.select([schema.PRODUCT_NAME, schema.SEI])
    scored = (
        pairs.join(sei.rename({schema.PRODUCT_NAME: ANCHOR, schema.SEI: "_anchor_sei"}), on=ANCHOR, how="left")
        .join(sei.rename({schema.PRODUCT_NAME: BOUGHT_WITH, schema.SEI: "_with_sei"}), on=BOUGHT_WITH, how="left")
    )

    unknown = scored.filter(pl.col("_anchor_sei").is_null() | pl.col("_with_sei").is_null())
    if unknown.height:
        logger.warning("Affinity pairs reference unknown products", pairs=unknown.height)

    affinity = (
        scored.drop_nulls(subset=["_anchor_sei", "_with_sei"])
        .with_columns([
            pl.col("_anchor_sei").round(1).alias("anchorSEI"),
            pl.col("_with_sei").round(1).alias("boughtWithSEI"),
            ((pl.col("_anchor_sei") + pl.col("_with_sei")) / 2).round(1).alias("combinedEfficiency"),
        ])
        .sort("_pair")
        .select([pl.col(c).cast(t) for c, t in schema.AFFINITY_SCHEMA.items()])
        .sort("combinedEfficiency", descending=True, maintain_order=True)
    )

    logger.info("Affinity analysis generated", pairs=len(affinity))
    return affinity
