"""
Customer-to-product join shared by the segment and profile analyses.
"""

from dataclasses import dataclass, field
from typing import List

import polars as pl
import structlog

from sqinch import schema

logger = structlog.get_logger(__name__)

ROW_INDEX = "_row"


@dataclass(frozen=True)
class JoinMiss:
    """A purchase row whose product is absent from the catalog"""
    row: int
    customer_email: str
    product_name: str


@dataclass
class JoinResult:
    """Matched purchase rows plus the rows that were dropped"""
    joined: pl.DataFrame
    misses: List[JoinMiss] = field(default_factory=list)


def join_products(customers: pl.DataFrame, products: pl.DataFrame) -> JoinResult:
    """
    Attach each purchase row's product SEI and area by exact name match.

    Rows whose product is not in the catalog are dropped (soft failure) and
    returned as ``JoinMiss`` records. Input row order is preserved and the
    original row position is kept in the ``_row`` column.
    """
    lookup = products.select([schema.PRODUCT_NAME, schema.SEI, schema.SQUARE_INCHES])

    matched = (
        customers.with_row_index(ROW_INDEX)
        .join(lookup, on=schema.PRODUCT_NAME, how="left")
        .sort(ROW_INDEX)
    )

    unmatched = matched.filter(pl.col(schema.SEI).is_null())
    misses = [
        JoinMiss(
            row=row[ROW_INDEX],
            customer_email=row[schema.CUSTOMER_EMAIL],
            product_name=row[schema.PRODUCT_NAME],
        )
        for row in unmatched.iter_rows(named=True)
    ]

    if misses:
        logger.warning(
            "Purchase rows reference unknown products",
            rows=len(misses),
            products=sorted({m.product_name for m in misses}),
        )

    return JoinResult(joined=matched.filter(pl.col(schema.SEI).is_not_null()), misses=misses)
