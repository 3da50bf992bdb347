"""
Product Metrics Engine

Scores every catalog product by how much revenue it earns per square inch
of catalog space.
Includes:
- Catalog-wide revenue per square inch (area-weighted)
- Space Efficiency Index (SEI), 100 = catalog average
- Page-level revenue per square inch and page position ratio
"""

import polars as pl
import structlog

from sqinch import schema
from sqinch.exceptions import DataError

logger = structlog.get_logger(__name__)


class ProductMetricsEngine:
    """
    Derives efficiency metrics from the product record set alone.

    Output keeps the input's rows and order; derived columns are appended
    per ``schema.ENRICHED_PRODUCT_SCHEMA``.

    Example:
        engine = ProductMetricsEngine()
        enriched = engine.enrich(products_df)
    """

    def calculate_product_metrics(self, products: pl.DataFrame) -> pl.DataFrame:
        """
        Add revenue per square inch, SEI and the catalog average.

        The catalog average is total revenue over total area, not the mean
        of per-product ratios.

        Raises:
            DataError: If there are no products, or total area or total
                revenue is zero
        """
        if products.is_empty():
            raise DataError("The product file contains no valid product rows")

        non_positive = products.filter(pl.col(schema.SQUARE_INCHES) <= 0)
        if non_positive.height:
            names = non_positive[schema.PRODUCT_NAME].to_list()
            raise DataError(
                f"Products with zero or negative area: {', '.join(names[:5])}",
                details={"products": names},
            )

        total_revenue = products[schema.PRODUCT_REVENUE].sum()
        total_area = products[schema.SQUARE_INCHES].sum()

        if total_area == 0:
            raise DataError("Total catalog area is zero")
        catalog_avg = total_revenue / total_area
        if catalog_avg == 0:
            raise DataError("Total catalog revenue is zero; efficiency index is undefined")

        logger.debug(
            "Catalog average computed",
            products=len(products),
            total_revenue=total_revenue,
            total_area=total_area,
            catalog_avg_revenue_per_sq_in=catalog_avg,
        )

        rpsi = pl.col(schema.PRODUCT_REVENUE) / pl.col(schema.SQUARE_INCHES)
        return products.with_columns([
            rpsi.alias(schema.REVENUE_PER_SQ_IN),
            (rpsi / catalog_avg * 100).alias(schema.SEI),
            pl.lit(catalog_avg, dtype=pl.Float64).alias(schema.CATALOG_AVG_RPSI),
        ])

    def calculate_page_metrics(self, products: pl.DataFrame) -> pl.DataFrame:
        """
        Add page average revenue per square inch and page position ratio.

        A product alone on its page, or on a page with no revenue, has a
        ratio of exactly 1.0.
        """
        page = schema.PAGE_NUMBER
        page_avg = (
            pl.col(schema.PRODUCT_REVENUE).sum().over(page)
            / pl.col(schema.SQUARE_INCHES).sum().over(page)
        )

        products = products.with_columns([
            page_avg.alias(schema.PAGE_AVG_RPSI),
            pl.len().over(page).alias("_page_products"),
        ])

        return products.with_columns(
            pl.when((pl.col("_page_products") == 1) | (pl.col(schema.PAGE_AVG_RPSI) == 0))
            .then(pl.lit(1.0))
            .otherwise(pl.col(schema.REVENUE_PER_SQ_IN) / pl.col(schema.PAGE_AVG_RPSI))
            .alias(schema.PAGE_POSITION_RATIO)
        ).drop("_page_products")

    def enrich(self, products: pl.DataFrame) -> pl.DataFrame:
        """Run both metric passes and return the enriched product set"""
        enriched = self.calculate_page_metrics(self.calculate_product_metrics(products))
        enriched = enriched.select(
            [pl.col(c).cast(t) for c, t in schema.ENRICHED_PRODUCT_SCHEMA.items()]
        )

        logger.info(
            "Product metrics calculated",
            products=len(enriched),
            pages=enriched[schema.PAGE_NUMBER].n_unique(),
        )
        return enriched


def enrich_products(products: pl.DataFrame) -> pl.DataFrame:
    """
    Convenience function to compute product metrics.

    Args:
        products: Typed product records

    Returns:
        Enriched product DataFrame
    """
    return ProductMetricsEngine().enrich(products)
