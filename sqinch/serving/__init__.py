"""
Serving Layer Module

HTTP API, table export and the narrative cache.
"""
from .cache import NarrativeCache, content_digest
from .export import export_filename, export_table, read_table, rows_to_table

__all__ = [
    "NarrativeCache",
    "content_digest",
    "export_filename",
    "export_table",
    "read_table",
    "rows_to_table",
]
