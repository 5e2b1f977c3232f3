"""
Data Validation Module

Rule-based quality checks for the dashboard source tables.

Features:
- Null and uniqueness checks on keys
- Range checks on spend, engagement and prices
- Allowed-value checks on plan types
- Referential integrity between subscriptions and users
- Custom row-level business rules
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from marketing_mrr.config import get_settings

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - blocks pipeline when fail_on_error is set
    WARNING = "warning"  # Non-critical - logged but continues
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


class DataQualityError(Exception):
    """Raised when ERROR-severity checks fail and the run must stop"""


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


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Data validator with a chainable check suite.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("user_id")
        validator.add_range_check("plan_price", min_value=0)
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

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
        columns: List[str],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that the combination of ``columns`` identifies each row"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{'_'.join(columns)}"
            missing = [c for c in columns if c not in df.columns]
            if missing:
                return _missing_column(name, missing[0], severity)

            total = len(df)
            unique_count = df.select(columns).unique().height
            duplicate_count = total - unique_count
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"{columns} has {duplicate_count} duplicate values" if not passed else f"{columns} values are unique",
                details={"unique_count": unique_count, "duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def _add_violation_check(
        self,
        name: str,
        violation: Callable[[], pl.Expr],
        severity: ValidationSeverity,
        fail_message: str,
        pass_message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "DataValidator":
        """Register a check that fails when any row matches ``violation``"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            try:
                failed = df.filter(violation()).height
            except pl.exceptions.ColumnNotFoundError as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Column not found: {e}",
                )

            return ValidationCheck(
                name=name,
                passed=failed == 0,
                severity=severity,
                message=pass_message if failed == 0 else f"{failed} rows: {fail_message}",
                details={**(details or {}), "violation_count": failed},
                failed_rows=failed,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within ``[min_value, max_value]``"""
        def violation() -> pl.Expr:
            below = pl.col(column) < min_value if min_value is not None else pl.lit(False)
            above = pl.col(column) > max_value if max_value is not None else pl.lit(False)
            return below | above

        return self._add_violation_check(
            name=f"range_{column}",
            violation=violation,
            severity=severity,
            fail_message=f"'{column}' outside range [{min_value}, {max_value}]",
            pass_message=f"All '{column}' values in range",
            details={"min": min_value, "max": max_value},
        )

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set; nulls are left to not-null checks"""
        return self._add_violation_check(
            name=f"enum_{column}",
            violation=lambda: ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null(),
            severity=severity,
            fail_message=f"'{column}' not in {allowed_values}",
            pass_message=f"All '{column}' values are valid",
            details={"allowed_values": allowed_values},
        )

    def add_row_check(
        self,
        name: str,
        violation: pl.Expr,
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that no row satisfies the ``violation`` expression"""
        return self._add_violation_check(
            name=name,
            violation=lambda: violation,
            severity=severity,
            fail_message=message_on_fail,
            pass_message="Check passed",
        )

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that every non-null ``column`` value exists in the reference table"""
        def violation() -> pl.Expr:
            ref_values = reference_df[reference_column].unique().to_list()
            return ~pl.col(column).is_in(ref_values) & pl.col(column).is_not_null()

        return self._add_violation_check(
            name=f"ref_integrity_{column}",
            violation=violation,
            severity=severity,
            fail_message=f"'{column}' has no match in '{reference_column}'",
            pass_message="Referential integrity maintained",
        )

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

        logger.info(f"Running {len(self._checks)} validation checks on {len(df)} rows")

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

        validation_result = ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )

        logger.info(
            f"Validation complete: {status.value}",
            success_rate=round(validation_result.success_rate, 1),
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return validation_result


# Pre-built validators for the source tables
def create_campaigns_validator(strict_mode: bool = False) -> DataValidator:
    """Validator for daily campaign metrics"""
    return (
        DataValidator(strict_mode=strict_mode)
        .add_not_null_check("date")
        .add_not_null_check("campaign")
        .add_unique_check(["date", "campaign"], severity=ValidationSeverity.WARNING)
        .add_range_check("cost", min_value=0)
        .add_range_check("clicks", min_value=0)
        .add_range_check("impressions", min_value=0)
    )


def create_users_validator(strict_mode: bool = False) -> DataValidator:
    """Validator for users"""
    return (
        DataValidator(strict_mode=strict_mode)
        .add_not_null_check("user_id")
        .add_not_null_check("signup_date")
        .add_unique_check(["user_id"])
        .add_not_null_check("signup_campaign", severity=ValidationSeverity.WARNING)
    )


def create_subscriptions_validator(users_df: pl.DataFrame, strict_mode: bool = False) -> DataValidator:
    """
    Validator for subscriptions.

    Orphaned subscriptions are reported as a warning: the enrichment step
    drops them, so they never reach the dashboard.
    """
    report = get_settings().report
    return (
        DataValidator(strict_mode=strict_mode)
        .add_not_null_check("subscription_id")
        .add_unique_check(["subscription_id"])
        .add_not_null_check("subscription_start_date")
        .add_not_null_check("plan_price")
        .add_range_check("plan_price", min_value=0)
        .add_enum_check("subscription_type", [report.monthly_type, report.yearly_type])
        .add_row_check(
            name="end_not_before_start",
            violation=pl.col("subscription_end_date") < pl.col("subscription_start_date"),
            message_on_fail="subscription ends before it starts",
            severity=ValidationSeverity.WARNING,
        )
        .add_referential_integrity_check(
            "user_id",
            users_df,
            "user_id",
            severity=ValidationSeverity.WARNING,
        )
    )
