"""
Source Table Loader

Batch ingestion of the dashboard's source tables from CSV, JSON, and Parquet files.
Supports:
- Required column checks per source table
- Null value normalization
- File hashing for audit logging
- Calendar month generation when no months table is supplied
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from marketing_mrr.config import get_settings

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


class LoadStatus(str, Enum):
    """Load status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SourceTable(str, Enum):
    """Source tables consumed by the dashboard"""
    CAMPAIGNS = "campaigns"
    USERS = "users"
    SUBSCRIPTIONS = "subscriptions"
    MONTHS = "months"


REQUIRED_COLUMNS: Dict[SourceTable, List[str]] = {
    SourceTable.CAMPAIGNS: ["date", "campaign", "cost", "clicks", "impressions"],
    SourceTable.USERS: ["signup_date", "user_id", "signup_campaign"],
    SourceTable.SUBSCRIPTIONS: [
        "user_id",
        "subscription_id",
        "subscription_type",
        "subscription_start_date",
        "subscription_end_date",
        "plan_price",
    ],
    SourceTable.MONTHS: ["date_month"],
}


class SourceLoadError(Exception):
    """Raised when a source table cannot be loaded"""


@dataclass
class SourceFileConfig:
    """Configuration for loading one source file"""
    file_path: Union[str, Path]
    file_format: FileFormat
    table: SourceTable
    delimiter: str = ","
    encoding: str = "utf8"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])


class LoadResult(BaseModel):
    """Result of a single source load"""
    file_path: str
    table: SourceTable
    status: LoadStatus
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


@dataclass
class SourceTables:
    """The four inputs of a dashboard run"""
    campaigns: pl.DataFrame
    users: pl.DataFrame
    subscriptions: pl.DataFrame
    months: pl.DataFrame
    results: List[LoadResult] = field(default_factory=list)


def generate_calendar_months(year: int) -> pl.DataFrame:
    """Month dimension: the first day of every month of ``year``."""
    return pl.DataFrame({
        "date_month": pl.date_range(
            date(year, 1, 1), date(year, 12, 1), interval="1mo", eager=True
        ),
    })


class SourceLoader:
    """
    Loads the campaign, user, subscription and month tables from the raw zone.

    Example:
        loader = SourceLoader(raw_path="data/raw")
        sources = loader.load_sources()
    """

    def __init__(
        self,
        raw_path: Optional[str] = None,
        file_format: Optional[FileFormat] = None,
    ):
        settings = get_settings()
        self.raw_path = Path(raw_path or settings.data_lake.raw_path)
        self.file_format = file_format or FileFormat(settings.data_lake.default_format)

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read CSV file"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            try_parse_dates=True,
        )

    def _read_json(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read JSON file"""
        return pl.read_json(config.file_path)

    def _read_jsonl(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read JSON Lines (NDJSON) file"""
        return pl.read_ndjson(config.file_path)

    def _read_parquet(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(config.file_path)

    def _read_file(self, config: SourceFileConfig) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSON: self._read_json,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(config.file_format)
        if not reader:
            raise SourceLoadError(f"Unsupported file format: {config.file_format}")
        return reader(config)

    def _missing_columns(self, df: pl.DataFrame, table: SourceTable) -> List[str]:
        """Required columns absent from the frame"""
        return [c for c in REQUIRED_COLUMNS[table] if c not in df.columns]

    def source_path(self, name: str) -> Path:
        """Resolve a table name to a file in the raw zone"""
        return self.raw_path / f"{name}.{self.file_format.value}"

    def load(self, config: SourceFileConfig) -> Tuple[Optional[pl.DataFrame], LoadResult]:
        """
        Load one source file.

        Args:
            config: Source file configuration

        Returns:
            The loaded frame (None on failure) and the LoadResult
        """
        file_path = Path(config.file_path)
        started_at = datetime.utcnow()

        result = LoadResult(
            file_path=str(file_path),
            table=config.table,
            status=LoadStatus.RUNNING,
            started_at=started_at,
        )

        logger.info("Starting source load", file=str(file_path), table=config.table.value)

        df = None
        try:
            if not file_path.exists():
                raise SourceLoadError(f"File not found: {file_path}")

            result.file_hash = self._compute_file_hash(file_path)
            df = self._read_file(config)

            missing = self._missing_columns(df, config.table)
            if missing:
                raise SourceLoadError(f"{config.table.value}: missing columns {missing}")

            # Remove completely null rows
            df = df.filter(~pl.all_horizontal(pl.all().is_null()))

            result.status = LoadStatus.COMPLETED
            result.rows_loaded = len(df)

        except Exception as e:
            result.status = LoadStatus.FAILED
            result.error_message = str(e)
            df = None
            logger.error("Source load failed", error=str(e), file=str(file_path))

        result.completed_at = datetime.utcnow()
        result.load_duration_seconds = (result.completed_at - started_at).total_seconds()

        if result.status == LoadStatus.COMPLETED:
            logger.info(
                "Source load completed",
                table=config.table.value,
                rows_loaded=result.rows_loaded,
                duration_seconds=result.load_duration_seconds,
            )

        return df, result

    def load_sources(self, reporting_year: Optional[int] = None) -> SourceTables:
        """
        Load all dashboard inputs from the raw zone.

        The months table is read when configured, otherwise generated for
        the reporting year.

        Raises:
            SourceLoadError: if any configured table failed to load
        """
        settings = get_settings()
        lake = settings.data_lake
        year = reporting_year or settings.report.reporting_year

        names = {
            SourceTable.CAMPAIGNS: lake.campaigns_file,
            SourceTable.USERS: lake.users_file,
            SourceTable.SUBSCRIPTIONS: lake.subscriptions_file,
        }
        if lake.months_file:
            names[SourceTable.MONTHS] = lake.months_file

        frames: Dict[SourceTable, pl.DataFrame] = {}
        results = []
        for table, name in names.items():
            config = SourceFileConfig(
                file_path=self.source_path(name),
                file_format=self.file_format,
                table=table,
            )
            df, result = self.load(config)
            results.append(result)
            if df is not None:
                frames[table] = df

        failed = [r for r in results if r.status == LoadStatus.FAILED]
        if failed:
            raise SourceLoadError(
                "; ".join(f"{r.table.value}: {r.error_message}" for r in failed)
            )

        if SourceTable.MONTHS not in frames:
            frames[SourceTable.MONTHS] = generate_calendar_months(year)
            logger.info("Generated calendar months", year=year)

        return SourceTables(
            campaigns=frames[SourceTable.CAMPAIGNS],
            users=frames[SourceTable.USERS],
            subscriptions=frames[SourceTable.SUBSCRIPTIONS],
            months=frames[SourceTable.MONTHS],
            results=results,
        )
