"""
Table Schemas

Column names and dtypes for the input record sets and the four derived
analysis tables. Input column names are the exact header strings expected
in uploaded files; output column order is the export column order.
"""

from enum import Enum
from typing import Dict

import polars as pl

# Product catalog columns
PRODUCT_NAME = "Product Name"
PRODUCT_REVENUE = "Product Sales Revenue"
UNITS_SOLD = "Units Sold"
SQUARE_INCHES = "Square Inches"
PAGE_NUMBER = "Page Number"
CATALOG_PRICE = "Catalog Price"

# Customer purchase log columns
CUSTOMER_EMAIL = "Customer Email"
UNITS_PURCHASED = "Units Purchased"
REVENUE_GENERATED = "Revenue Generated"
AGE_RANGE = "Age Range"
INCOME_TIER = "Income Tier"
LOCATION = "Location"

# Derived product columns
REVENUE_PER_SQ_IN = "revenuePerSqIn"
SEI = "spaceEfficiencyIndex"
CATALOG_AVG_RPSI = "catalogAvgRevenuePerSqIn"
PAGE_AVG_RPSI = "pageAvgRevenuePerSqIn"
PAGE_POSITION_RATIO = "pagePositionRatio"

PRODUCT_SCHEMA: Dict[str, pl.DataType] = {
    PRODUCT_NAME: pl.Utf8,
    PRODUCT_REVENUE: pl.Float64,
    UNITS_SOLD: pl.Int64,
    SQUARE_INCHES: pl.Float64,
    PAGE_NUMBER: pl.Int64,
    CATALOG_PRICE: pl.Float64,
}

CUSTOMER_SCHEMA: Dict[str, pl.DataType] = {
    CUSTOMER_EMAIL: pl.Utf8,
    PRODUCT_NAME: pl.Utf8,
    UNITS_PURCHASED: pl.Int64,
    REVENUE_GENERATED: pl.Float64,
    AGE_RANGE: pl.Utf8,
    INCOME_TIER: pl.Utf8,
    LOCATION: pl.Utf8,
}

# Columns a row cannot be analysed without; Catalog Price is carried through only
PRODUCT_REQUIRED = [PRODUCT_NAME, PRODUCT_REVENUE, UNITS_SOLD, SQUARE_INCHES, PAGE_NUMBER]
CUSTOMER_REQUIRED = [CUSTOMER_EMAIL, PRODUCT_NAME, UNITS_PURCHASED, REVENUE_GENERATED]

ENRICHED_PRODUCT_SCHEMA: Dict[str, pl.DataType] = {
    **PRODUCT_SCHEMA,
    REVENUE_PER_SQ_IN: pl.Float64,
    SEI: pl.Float64,
    CATALOG_AVG_RPSI: pl.Float64,
    PAGE_AVG_RPSI: pl.Float64,
    PAGE_POSITION_RATIO: pl.Float64,
}

SEGMENT_SCHEMA: Dict[str, pl.DataType] = {
    "segment": pl.Utf8,
    "customers": pl.Int64,
    "totalRevenue": pl.Float64,
    "weightedAvgSEI": pl.Float64,
    "spaceConsumed": pl.Float64,
    "revenuePerSqIn": pl.Float64,
}

AFFINITY_SCHEMA: Dict[str, pl.DataType] = {
    "anchorProduct": pl.Utf8,
    "anchorSEI": pl.Float64,
    "boughtWithProduct": pl.Utf8,
    "boughtWithSEI": pl.Float64,
    "coPurchases": pl.Int64,
    "combinedEfficiency": pl.Float64,
}

PROFILE_SCHEMA: Dict[str, pl.DataType] = {
    "customerEmail": pl.Utf8,
    "ageRange": pl.Utf8,
    "incomeTier": pl.Utf8,
    "productsBought": pl.Int64,
    "totalSpent": pl.Float64,
    "avgSEI": pl.Float64,
    "revenueWeightedSEI": pl.Float64,
}


def empty_frame(schema: Dict[str, pl.DataType]) -> pl.DataFrame:
    """Zero-row frame with the given schema"""
    return pl.DataFrame(schema=schema)


class AnalysisView(str, Enum):
    """Result views, each backed by one analysis table"""
    FOUNDATIONAL = "foundational"
    SEGMENT = "segment"
    AFFINITY = "affinity"
    PROFILES = "profiles"


VIEW_SCHEMAS: Dict[AnalysisView, Dict[str, pl.DataType]] = {
    AnalysisView.FOUNDATIONAL: ENRICHED_PRODUCT_SCHEMA,
    AnalysisView.SEGMENT: SEGMENT_SCHEMA,
    AnalysisView.AFFINITY: AFFINITY_SCHEMA,
    AnalysisView.PROFILES: PROFILE_SCHEMA,
}
