"""
Unit Tests - Data Quality
"""
from datetime import date

import pytest
import polars as pl

from marketing_mrr.quality.validators import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_campaigns_validator,
    create_subscriptions_validator,
    create_users_validator,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"user_id": ["u1", "u2", "u3"]})

        result = DataValidator().add_not_null_check("user_id").validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"user_id": ["u1", None, "u3"]})

        result = DataValidator().add_not_null_check("user_id").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1
        assert result.checks[0].failed_rows == 1

    def test_missing_column_fails(self):
        df = pl.DataFrame({"other": [1]})

        result = DataValidator().add_not_null_check("user_id").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert "not found" in result.checks[0].message

    def test_unique_check_on_composite_key(self):
        """Test uniqueness across (date, campaign)"""
        df = pl.DataFrame({
            "date": [date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 2)],
            "campaign": ["A", "B", "A"],
        })

        result = DataValidator().add_unique_check(["date", "campaign"]).validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"user_id": ["u1", "u2", "u1"]})

        result = DataValidator().add_unique_check(["user_id"]).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_range_check(self):
        """Test range check"""
        df = pl.DataFrame({"plan_price": [10.0, 50.0, -5.0, 200.0]})

        result = DataValidator().add_range_check("plan_price", min_value=0, max_value=100).validate(df)

        assert result.status == ValidationStatus.FAILED
        # Two values outside range: -5 and 200
        assert result.checks[0].failed_rows == 2

    def test_enum_check(self):
        """Test allowed values check"""
        df = pl.DataFrame({"subscription_type": ["Monthly", "Yearly", "Weekly"]})

        result = DataValidator().add_enum_check("subscription_type", ["Monthly", "Yearly"]).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_row_check(self):
        """Test row-level business rule"""
        df = pl.DataFrame({
            "subscription_start_date": [date(2024, 3, 1), date(2024, 3, 1)],
            "subscription_end_date": [date(2024, 2, 1), None],
        })

        result = DataValidator().add_row_check(
            name="end_not_before_start",
            violation=pl.col("subscription_end_date") < pl.col("subscription_start_date"),
            message_on_fail="ends before it starts",
        ).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_row_check_missing_column(self):
        df = pl.DataFrame({"other": [1]})

        result = DataValidator().add_row_check(
            name="end_not_before_start",
            violation=pl.col("subscription_end_date") < pl.col("subscription_start_date"),
            message_on_fail="ends before it starts",
        ).validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_referential_integrity_check(self):
        """Test referential integrity check"""
        users = pl.DataFrame({"user_id": ["u1", "u2"]})
        subscriptions = pl.DataFrame({"user_id": ["u1", "u2", "u3", None]})

        result = DataValidator().add_referential_integrity_check(
            "user_id", users, "user_id"
        ).validate(subscriptions)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_warning_gives_partial_status(self):
        """Test warnings don't fail validation"""
        df = pl.DataFrame({"signup_campaign": ["A", None]})

        result = DataValidator().add_not_null_check(
            "signup_campaign", severity=ValidationSeverity.WARNING
        ).validate(df)

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1

    def test_strict_mode_fails_on_warning(self):
        df = pl.DataFrame({"signup_campaign": ["A", None]})

        result = DataValidator(strict_mode=True).add_not_null_check(
            "signup_campaign", severity=ValidationSeverity.WARNING
        ).validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_success_rate(self):
        df = pl.DataFrame({"user_id": ["u1", None]})

        result = (
            DataValidator()
            .add_unique_check(["user_id"])
            .add_not_null_check("user_id")
            .validate(df)
        )

        assert result.success_rate == pytest.approx(50.0)


class TestSourceValidators:
    """Tests for the pre-built source validators"""

    def test_campaigns_validator_passes(self, campaigns_df):
        result = create_campaigns_validator().validate(campaigns_df)

        assert result.status == ValidationStatus.PASSED

    def test_campaigns_validator_rejects_negative_cost(self, campaigns_df):
        df = campaigns_df.with_columns(pl.lit(-1.0).alias("cost"))

        result = create_campaigns_validator().validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_users_validator_passes(self, users_df):
        result = create_users_validator().validate(users_df)

        assert result.status == ValidationStatus.PASSED

    def test_subscriptions_validator_flags_orphans_as_warning(self, subscriptions_df, users_df):
        result = create_subscriptions_validator(users_df).validate(subscriptions_df)

        assert result.status == ValidationStatus.PARTIAL
        failed = [c for c in result.checks if not c.passed]
        assert [c.name for c in failed] == ["ref_integrity_user_id"]
        assert failed[0].severity == ValidationSeverity.WARNING

    def test_subscriptions_validator_rejects_unknown_plan_type(self, subscriptions_df, users_df):
        df = subscriptions_df.with_columns(pl.lit("Weekly").alias("subscription_type"))

        result = create_subscriptions_validator(users_df).validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_subscriptions_validator_strict_mode(self, subscriptions_df, users_df):
        result = create_subscriptions_validator(users_df, strict_mode=True).validate(subscriptions_df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 0
        assert result.warning_count == 1
