"""
Table Export

Serializes analysis tables to CSV for download, and reads exported files
back with the table's schema.
"""

import io
from datetime import date
from typing import Any, Dict, List, Optional

import polars as pl

from sqinch.schema import VIEW_SCHEMAS, AnalysisView, empty_frame


def export_table(df: pl.DataFrame, view: AnalysisView) -> str:
    """
    Write one analysis table as CSV text.

    Columns follow the view's schema order.
    """
    columns = list(VIEW_SCHEMAS[AnalysisView(view)])
    return df.select(columns).write_csv()


def read_table(text: str, view: AnalysisView) -> pl.DataFrame:
    """Parse CSV text produced by ``export_table`` back into a typed table"""
    return pl.read_csv(
        io.BytesIO(text.encode("utf-8")),
        schema=VIEW_SCHEMAS[AnalysisView(view)],
    )


def rows_to_table(rows: List[Dict[str, Any]], view: AnalysisView) -> pl.DataFrame:
    """Typed table from JSON rows (as returned by the analysis endpoint)"""
    table_schema = VIEW_SCHEMAS[AnalysisView(view)]
    if not rows:
        return empty_frame(table_schema)
    return pl.DataFrame(
        [{col: row.get(col) for col in table_schema} for row in rows],
        schema=table_schema,
        strict=False,
    )


def export_filename(view: AnalysisView, day: Optional[date] = None) -> str:
    """Download file name, e.g. sqinch_segment_2025-01-31.csv"""
    day = day or date.today()
    return f"sqinch_{AnalysisView(view).value}_{day.isoformat()}.csv"
