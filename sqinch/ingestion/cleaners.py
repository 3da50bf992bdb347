"""
Record Cleaning Module

Cleaning transformations applied to raw catalog and purchase-log frames
before analysis.
Handles:
- Whitespace trimming
- Currency/number format normalization
- Numeric type coercion
- Dropping rows that cannot be analysed

Numeric policy: a value that cannot be read as a finite number (or, for
integer columns, as a whole number) becomes null, and a row with a null in
any required column is dropped and counted.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import polars as pl
import structlog

from sqinch import schema

logger = structlog.get_logger(__name__)


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    table: str
    total_rows: int
    rows_after_cleaning: int
    nulls_by_column: Dict[str, int] = field(default_factory=dict)

    @property
    def rows_dropped(self) -> int:
        return self.total_rows - self.rows_after_cleaning


class RecordCleaner:
    """
    Cleaner for the two input record sets.

    Expects frames read with every column as a string and returns frames
    typed per ``schema.PRODUCT_SCHEMA`` / ``schema.CUSTOMER_SCHEMA``.

    Example:
        cleaner = RecordCleaner()
        products, stats = cleaner.clean_products(raw_df)
    """

    def _trim_strings(self, df: pl.DataFrame, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Trim whitespace from string columns"""
        string_cols = columns or [
            col for col, dtype in zip(df.columns, df.dtypes)
            if dtype == pl.Utf8
        ]

        return df.with_columns([
            pl.col(col).str.strip_chars().alias(col)
            for col in string_cols
            if col in df.columns
        ])

    def _normalize_currency(self, df: pl.DataFrame, amount_columns: List[str]) -> pl.DataFrame:
        """Remove currency symbols and thousands separators"""
        return df.with_columns([
            pl.col(col)
            .cast(pl.Utf8)
            .str.replace_all(r"[$€£¥,]", "")
            .str.strip_chars()
            .alias(col)
            for col in amount_columns
            if col in df.columns
        ])

    def _cast_numeric(self, df: pl.DataFrame, columns: Dict[str, pl.DataType]) -> pl.DataFrame:
        """Cast numeric columns, turning unreadable values into nulls"""
        exprs = []
        for col, dtype in columns.items():
            if col not in df.columns:
                continue
            as_float = pl.col(col).cast(pl.Float64, strict=False)
            finite = pl.when(as_float.is_finite()).then(as_float).otherwise(None)
            if dtype.is_integer():
                expr = (
                    pl.when(finite == finite.floor())
                    .then(finite)
                    .otherwise(None)
                    .cast(dtype)
                )
            else:
                expr = finite.cast(dtype)
            exprs.append(expr.alias(col))
        return df.with_columns(exprs)

    def _blank_to_null(self, df: pl.DataFrame, columns: List[str]) -> pl.DataFrame:
        """Empty strings count as missing"""
        return df.with_columns([
            pl.when(pl.col(col) == "").then(None).otherwise(pl.col(col)).alias(col)
            for col in columns
            if col in df.columns
        ])

    def _drop_incomplete(
        self,
        df: pl.DataFrame,
        required: List[str],
        table: str,
        total_rows: int,
    ) -> Tuple[pl.DataFrame, CleaningStats]:
        """Drop rows with a null in any required column"""
        nulls = {col: df[col].null_count() for col in required}
        cleaned = df.drop_nulls(subset=required)

        stats = CleaningStats(
            table=table,
            total_rows=total_rows,
            rows_after_cleaning=len(cleaned),
            nulls_by_column={col: n for col, n in nulls.items() if n},
        )

        if stats.rows_dropped:
            logger.warning(
                "Dropped malformed rows",
                table=table,
                rows_dropped=stats.rows_dropped,
                nulls_by_column=stats.nulls_by_column,
            )

        return cleaned, stats

    def _clean(
        self,
        df: pl.DataFrame,
        table_schema: Dict[str, pl.DataType],
        required: List[str],
        table: str,
    ) -> Tuple[pl.DataFrame, CleaningStats]:
        # Whole-blank lines carry no information and are not counted
        df = df.filter(~pl.all_horizontal(pl.all().is_null()))
        total_rows = len(df)

        df = self._trim_strings(df, list(df.columns))

        string_cols = [c for c, t in table_schema.items() if t == pl.Utf8]
        numeric_cols = {c: t for c, t in table_schema.items() if t != pl.Utf8}

        df = self._blank_to_null(df, string_cols)
        df = self._normalize_currency(df, list(numeric_cols))
        df = self._cast_numeric(df, numeric_cols)

        # Known columns first, extra columns (e.g. further demographics) kept as text
        extra = [c for c in df.columns if c not in table_schema]
        df = self._blank_to_null(df.select(list(table_schema) + extra), extra)
        return self._drop_incomplete(df, required, table, total_rows)

    def clean_products(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """Apply catalog-specific cleaning transformations"""
        return self._clean(df, schema.PRODUCT_SCHEMA, schema.PRODUCT_REQUIRED, "products")

    def clean_customers(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """Apply purchase-log-specific cleaning transformations"""
        return self._clean(df, schema.CUSTOMER_SCHEMA, schema.CUSTOMER_REQUIRED, "customers")


def clean_dataframe(df: pl.DataFrame, data_type: str) -> pl.DataFrame:
    """
    Convenience function to clean a raw string-typed frame.

    Args:
        df: Input DataFrame
        data_type: "products" or "customers"

    Returns:
        Cleaned DataFrame
    """
    cleaner = RecordCleaner()

    if data_type == "products":
        return cleaner.clean_products(df)[0]
    elif data_type == "customers":
        return cleaner.clean_customers(df)[0]
    raise ValueError(f"Unknown data type: {data_type}")
