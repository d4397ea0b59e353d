"""
NYC Shooting Report - Base Ingester

Abstract base class for dataset ingesters. Provides a consistent interface
for loading a full snapshot of a source table with:
- Schema validation at load time
- Error handling
- Structured result reporting

Usage:
    class ShootingIngester(BaseIngester):
        def fetch_data(self, path=None) -> pd.DataFrame:
            ...
        def get_required_columns(self) -> list[str]:
            return ["OCCUR_DATE", "OCCUR_TIME", "BORO", "VIC_RACE"]
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from shooting_report.shared.config import Settings, get_config
from shooting_report.shared.errors import SchemaError

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Result of a data ingestion operation."""

    dataset: str
    execution_date: str
    rows_fetched: int
    source: str | None = None
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    missing_columns: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_fetched": self.rows_fetched,
            "source": self.source,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "missing_columns": self.missing_columns,
            "metadata": self.metadata,
        }


class BaseIngester(ABC):
    """
    Abstract base class for dataset ingestion.

    Subclasses must implement:
    - fetch_data(): Fetch data from the source
    - get_required_columns(): Return the raw columns the dataset must carry
    - get_dataset_name(): Return the dataset name
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the ingester.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def fetch_data(self, path: str | Path | None = None) -> pd.DataFrame:
        """
        Fetch data from the source.

        Args:
            path: Optional local file to read instead of the remote source

        Returns:
            DataFrame containing the fetched data
        """
        pass

    @abstractmethod
    def get_required_columns(self) -> list[str]:
        """
        Get the raw columns the source must provide.

        Returns:
            List of raw column names
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "shootings")
        """
        pass

    def get_source(self) -> str:
        """Get a description of the source (URL by default)."""
        return self.config.source.url

    def run(
        self,
        execution_date: str,
        path: str | Path | None = None,
    ) -> IngestionResult:
        """
        Run the ingestion process.

        Args:
            execution_date: Report date in YYYY-MM-DD format
            path: Optional local file to read instead of the remote source

        Returns:
            IngestionResult with details about the ingestion
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        source = str(path) if path is not None else self.get_source()

        logger.info(
            f"Starting ingestion for {dataset_name}",
            extra={"dataset": dataset_name, "execution_date": execution_date, "source": source},
        )

        try:
            df = self.fetch_data(path=path)

            # Fail fast on shape mismatch
            is_valid, errors = self.validate_schema(df)
            if not is_valid:
                missing = [c for c in self.get_required_columns() if c not in df.columns]
                raise SchemaError(f"Schema validation failed: {errors}", missing_columns=missing)

            duration = time.time() - start_time

            result = IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_fetched=len(df),
                source=source,
                duration_seconds=duration,
                success=True,
                metadata={"columns": list(df.columns)},
            )

            logger.info(
                f"Ingestion complete for {dataset_name}: {len(df)} rows",
                extra=result.to_dict(),
            )

            # Store the dataframe for downstream access
            self._data = df

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Ingestion failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_fetched=0,
                source=source,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
                missing_columns=e.missing_columns if isinstance(e, SchemaError) else [],
            )

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently fetched data."""
        return getattr(self, "_data", None)

    def validate_schema(self, df: pd.DataFrame) -> tuple[bool, list[str]]:
        """
        Perform basic schema validation on fetched data.

        Args:
            df: DataFrame to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        for col in self.get_required_columns():
            if col not in df.columns:
                errors.append(f"Required column '{col}' not found")

        if len(df) == 0:
            errors.append("DataFrame is empty")

        return len(errors) == 0, errors
