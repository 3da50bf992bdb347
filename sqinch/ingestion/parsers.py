"""
Record Parser

Turns raw delimited text (an uploaded catalog file and a purchase-log file)
into typed polars frames.
Supports:
- Header validation against the expected column names
- Tolerant reading of ragged or blank lines
- Per-file parse reports (rows read, rows dropped, reasons)

Malformed rows are dropped and reported; only a file that cannot be read
at all, or that lacks required columns, fails the run.
"""

import io
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import polars as pl
import structlog

from sqinch import schema
from sqinch.exceptions import DataError
from sqinch.ingestion.cleaners import CleaningStats, RecordCleaner

logger = structlog.get_logger(__name__)

NULL_VALUES = ["", "NULL", "null", "None", "NA", "N/A", "NaN", "nan"]


@dataclass
class ParsedDatasets:
    """Typed input record sets for one analysis run"""
    products: pl.DataFrame
    customers: pl.DataFrame
    product_stats: CleaningStats
    customer_stats: CleaningStats


class RecordParser:
    """
    Parser for catalog and purchase-log text.

    Every column is read as a string first; typing and row rejection are
    left to ``RecordCleaner`` so that one policy governs both files.

    Example:
        parser = RecordParser()
        products, stats = parser.parse_products(product_csv_text)
    """

    def __init__(self, delimiter: str = ",", cleaner: Optional[RecordCleaner] = None):
        self.delimiter = delimiter
        self.cleaner = cleaner or RecordCleaner()

    def _read(self, text: str, table: str, expected: Dict[str, pl.DataType]) -> pl.DataFrame:
        """Read raw text into an all-string frame and check its header"""
        if text is None or not text.strip():
            raise DataError(f"The {table} file is empty", details={"table": table})

        # Excel exports often prepend a byte-order mark
        text = text.lstrip("\ufeff")

        try:
            df = pl.read_csv(
                io.BytesIO(text.encode("utf-8")),
                separator=self.delimiter,
                has_header=True,
                infer_schema_length=0,
                null_values=NULL_VALUES,
                truncate_ragged_lines=True,
            )
        except (
            pl.exceptions.NoDataError,
            pl.exceptions.ComputeError,
            pl.exceptions.DuplicateError,
        ) as e:
            raise DataError(
                f"Could not read the {table} file: {e}",
                details={"table": table},
            ) from e

        df = df.rename({col: col.strip() for col in df.columns})

        missing = missing_columns(df, list(expected))
        if missing:
            raise DataError(
                f"The {table} file is missing required columns: {', '.join(missing)}",
                details={"table": table, "missing_columns": missing},
            )

        logger.debug("Read raw records", table=table, rows=len(df), columns=df.columns)
        return df

    def parse_products(self, text: str) -> Tuple[pl.DataFrame, CleaningStats]:
        """Parse catalog text into product records"""
        raw = self._read(text, "products", schema.PRODUCT_SCHEMA)
        return self.cleaner.clean_products(raw)

    def parse_customers(self, text: str) -> Tuple[pl.DataFrame, CleaningStats]:
        """Parse purchase-log text into customer records"""
        raw = self._read(text, "customers", schema.CUSTOMER_SCHEMA)
        return self.cleaner.clean_customers(raw)


def load_datasets(product_text: str, customer_text: str, delimiter: str = ",") -> ParsedDatasets:
    """
    Parse both input files of an analysis run.

    Args:
        product_text: Catalog file contents
        customer_text: Purchase-log file contents
        delimiter: Field delimiter shared by both files

    Returns:
        ParsedDatasets with typed frames and cleaning statistics

    Raises:
        DataError: If either file is empty, unreadable or missing columns
    """
    parser = RecordParser(delimiter=delimiter)
    products, product_stats = parser.parse_products(product_text)
    customers, customer_stats = parser.parse_customers(customer_text)

    logger.info(
        "Datasets loaded",
        products=len(products),
        products_dropped=product_stats.rows_dropped,
        customer_rows=len(customers),
        customer_rows_dropped=customer_stats.rows_dropped,
    )

    return ParsedDatasets(
        products=products,
        customers=customers,
        product_stats=product_stats,
        customer_stats=customer_stats,
    )


def missing_columns(df: pl.DataFrame, expected: List[str]) -> List[str]:
    """Expected columns absent from a frame"""
    return [col for col in expected if col not in df.columns]
