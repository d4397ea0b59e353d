"""
NYC Shooting Report - Shooting Incident Ingester

Fetches the NYPD Shooting Incident dataset as CSV from NYC Open Data.

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Configuration:
    Source URL and timeout from configs/environments/*.yaml (source section),
    required columns from configs/datasets/shootings.yaml

Usage:
    from shooting_report.datasets.shootings.ingest import ShootingIngester

    ingester = ShootingIngester()
    result = ingester.run(execution_date="2024-01-15")
    df = ingester.get_data()
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import pandas as pd
import requests

from shooting_report.datasets.base import BaseIngester
from shooting_report.shared.config import Settings, get_dataset_config
from shooting_report.shared.errors import ReportError

logger = logging.getLogger(__name__)

# =============================================================================
# Dataset Configuration (loaded from shootings.yaml)
# =============================================================================
DATASET_CONFIG = get_dataset_config("shootings")

SCHEMA_CONFIG = DATASET_CONFIG.get("schema", {})
REQUIRED_COLUMNS = SCHEMA_CONFIG.get(
    "required_columns", ["OCCUR_DATE", "OCCUR_TIME", "BORO", "VIC_RACE"]
)


class ShootingIngester(BaseIngester):
    """
    Ingester for NYPD shooting incident data.

    Downloads the full CSV export in one request. Every column is read as
    text so that date, time and race parsing stays with the preprocessor.
    """

    def __init__(self, config: Settings | None = None):
        """Initialize shooting ingester."""
        super().__init__(config)
        self.url = self.config.source.url
        self.timeout = self.config.source.timeout_seconds

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_required_columns(self) -> list[str]:
        """Return the raw columns the export must carry."""
        return list(REQUIRED_COLUMNS)

    def fetch_data(self, path: str | Path | None = None) -> pd.DataFrame:
        """
        Fetch shooting incident data.

        Args:
            path: Local CSV to read instead of downloading

        Returns:
            DataFrame with one row per victim
        """
        if path is not None:
            logger.info(f"Reading shooting data from {path}")
            return self._read_csv(path)

        logger.info(f"Downloading shooting data from {self.url}", extra={"url": self.url})

        response = requests.get(self.url, timeout=self.timeout)

        if response.status_code != 200:
            raise RuntimeError(f"HTTP {response.status_code}: {response.text[:200]}")

        df = self._read_csv(io.StringIO(response.text))

        logger.info(
            f"Fetched {len(df)} shooting records",
            extra={"rows": len(df), "columns": list(df.columns)},
        )

        return df

    @staticmethod
    def _read_csv(source: Any) -> pd.DataFrame:
        # keep_default_na=False so the literal "NA" race label survives; only
        # empty cells (and the "(null)" marker used by the export) are missing
        return pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            na_values=["", "(null)"],
        )


# =============================================================================
# Convenience Functions
# =============================================================================


def ingest_shooting_data(
    execution_date: str,
    path: str | Path | None = None,
    config: Settings | None = None,
) -> pd.DataFrame:
    """
    Convenience function for ingesting shooting data.

    Raises:
        ReportError: if ingestion fails
    """
    ingester = ShootingIngester(config)
    result = ingester.run(execution_date, path=path)
    if not result.success:
        raise ReportError(f"Ingestion failed: {result.error_message}")
    return ingester.get_data()
