"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationResult,
    create_customers_validator,
    create_products_validator,
)

__all__ = [
    "DataValidator",
    "ValidationResult",
    "create_customers_validator",
    "create_products_validator",
]
