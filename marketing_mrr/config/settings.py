"""
Marketing Performance & MRR Dashboard
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataLakeSettings(BaseSettings):
    """Source and output storage configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    raw_path: str = Field(default="./data/raw", description="Directory holding the source tables")
    curated_path: str = Field(default="./data/curated", description="Directory for dashboard output")

    # File formats
    default_format: str = Field(default="csv", description="Source file format: csv, parquet, json or jsonl")

    # Source tables
    campaigns_file: str = Field(default="campaigns", description="Campaign metrics table (without extension)")
    users_file: str = Field(default="users", description="Users table (without extension)")
    subscriptions_file: str = Field(default="subscriptions", description="Subscriptions table (without extension)")
    months_file: Optional[str] = Field(default=None, description="Months table; generated from the reporting year when unset")

    @field_validator("default_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate file format value"""
        allowed = ["csv", "parquet", "json", "jsonl"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Dashboard computation settings"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    reporting_year: int = Field(default=2024, description="Calendar year covered by the month dimension")
    months_per_year: int = Field(default=12, description="Proration divisor for yearly plans")
    monthly_type: str = Field(default="Monthly", description="subscription_type value for monthly plans")
    yearly_type: str = Field(default="Yearly", description="subscription_type value for yearly plans")
    write_output: bool = Field(default=True, description="Write the dashboard to the curated zone")


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class DataQualitySettings(BaseSettings):
    """Data Quality Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    enable_data_quality_checks: bool = Field(
        default=True,
        alias="ENABLE_DATA_QUALITY_CHECKS",
        description="Enable data quality checks"
    )
    fail_on_error: bool = Field(
        default=False,
        alias="DATA_QUALITY_FAIL_ON_ERROR",
        description="Abort the run when an ERROR-severity check fails"
    )
    strict_mode: bool = Field(
        default=False,
        alias="DATA_QUALITY_STRICT_MODE",
        description="Treat failed WARNING checks (orphans, duplicate campaign-days) as failures"
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="marketing-mrr-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    data_quality: DataQualitySettings = Field(default_factory=DataQualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
