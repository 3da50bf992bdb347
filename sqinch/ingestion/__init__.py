"""
Data Ingestion Module
"""
from .cleaners import CleaningStats, RecordCleaner, clean_dataframe
from .parsers import ParsedDatasets, RecordParser, load_datasets

__all__ = [
    "CleaningStats",
    "RecordCleaner",
    "clean_dataframe",
    "ParsedDatasets",
    "RecordParser",
    "load_datasets",
]
