"""
Unit Tests - Configuration & Logging
"""
import pytest
import structlog
from pydantic import ValidationError

from marketing_mrr.config import Settings, bind_run_context, clear_run_context
from marketing_mrr.config.settings import DataLakeSettings, ReportSettings


class TestSettings:
    """Tests for pydantic settings"""

    def test_defaults(self, test_settings):
        assert test_settings.app_env == "testing"
        assert test_settings.report.months_per_year == 12
        assert test_settings.report.yearly_type == "Yearly"
        assert test_settings.data_lake.months_file is None
        assert not test_settings.is_production

    def test_rejects_unknown_environment(self):
        with pytest.raises(ValidationError):
            Settings(app_env="qa")

    def test_normalizes_file_format(self):
        assert DataLakeSettings(default_format="PARQUET").default_format == "parquet"

    def test_rejects_unknown_file_format(self):
        with pytest.raises(ValidationError):
            DataLakeSettings(default_format="xlsx")

    def test_report_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("REPORT_REPORTING_YEAR", "2023")

        assert ReportSettings().reporting_year == 2023


class TestRunContext:
    """Tests for run context binding"""

    def test_bind_and_clear(self):
        run_id = bind_run_context(2024)

        context = structlog.contextvars.get_contextvars()
        assert context["run_id"] == run_id
        assert context["reporting_year"] == 2024

        clear_run_context()
        assert "run_id" not in structlog.contextvars.get_contextvars()

    def test_explicit_run_id(self):
        try:
            assert bind_run_context(2024, run_id="nightly") == "nightly"
        finally:
            clear_run_context()
