"""
Data Validation Module

Rule-based quality checks on the typed input record sets.
Implements validation patterns inspired by Great Expectations.

Features:
- Null checks
- Uniqueness checks (product names are the join key)
- Range/boundary checks
- Severity levels: ERROR aborts the run, WARNING is logged only
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from sqinch import schema
from sqinch.exceptions import DataError

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - blocks pipeline
    WARNING = "warning"  # Non-critical - logged but continues


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def errors(self) -> List[ValidationCheck]:
        """Failed checks with ERROR severity"""
        return [c for c in self.checks if not c.passed and c.severity == ValidationSeverity.ERROR]

    def raise_for_errors(self, table: str) -> None:
        """Raise DataError carrying every ERROR-severity failure message"""
        errors = self.errors
        if errors:
            raise DataError(
                f"Invalid {table} data: " + "; ".join(c.message for c in errors),
                details={"table": table, "checks": [c.name for c in errors]},
            )


class DataValidator:
    """
    Data validator with a chainable check suite.

    Example:
        validator = DataValidator()
        validator.add_unique_check("Product Name")
        validator.add_range_check("Square Inches", min_value=0, inclusive=False)
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def reset(self) -> None:
        """Reset validator state"""
        self._checks = []

    @staticmethod
    def _column_missing(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
        )

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return self._column_missing(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return self._column_missing(name, column, severity)

            total = len(df)
            duplicated = (
                df.filter(pl.col(column).is_duplicated())[column]
                .unique(maintain_order=True)
                .to_list()
            )
            duplicate_count = total - df[column].n_unique()
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=(
                    f"Column '{column}' has duplicate values: {', '.join(map(str, duplicated[:5]))}"
                    if not passed else f"Column '{column}' values are unique"
                ),
                details={"duplicate_count": duplicate_count, "duplicates": duplicated},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        inclusive: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return self._column_missing(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value if inclusive else pl.col(column) <= min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value if inclusive else pl.col(column) >= max_value)

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0
            bounds = f"{'[' if inclusive else '('}{min_value}, {max_value}{']' if inclusive else ')'}"

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range {bounds}" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for positive values"""
        return self.add_range_check(column, min_value=0, inclusive=allow_zero, severity=severity)

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.utcnow()
        results = []

        logger.debug(f"Running {len(self._checks)} validation checks on {len(df)} rows")

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        completed_at = datetime.utcnow()

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )


# Pre-built validators for the two input record sets
def create_products_validator() -> DataValidator:
    """Create pre-configured validator for catalog data"""
    return (
        DataValidator()
        .add_not_null_check(schema.PRODUCT_NAME)
        .add_unique_check(schema.PRODUCT_NAME)
        .add_positive_check(schema.SQUARE_INCHES, allow_zero=False)
        .add_positive_check(schema.PRODUCT_REVENUE)
        .add_positive_check(schema.PAGE_NUMBER, allow_zero=False)
        .add_positive_check(schema.UNITS_SOLD, severity=ValidationSeverity.WARNING)
    )


def create_customers_validator() -> DataValidator:
    """Create pre-configured validator for purchase-log data"""
    return (
        DataValidator()
        .add_not_null_check(schema.CUSTOMER_EMAIL)
        .add_positive_check(schema.REVENUE_GENERATED, severity=ValidationSeverity.WARNING)
        .add_positive_check(schema.UNITS_PURCHASED, severity=ValidationSeverity.WARNING)
    )
