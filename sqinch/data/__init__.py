"""
Data Generation Module
"""
from .generators import CatalogGenerator, DataGenerator, PurchaseGenerator

__all__ = [
    "CatalogGenerator",
    "DataGenerator",
    "PurchaseGenerator",
]
