"""
NYC Shooting Report - Shooting Incident Preprocessor

Cleans shooting incident records before categorization and aggregation.

Transformations:
    - Column renaming to standardized names
    - Drop records with no victim race; relabel the literal "NA" as "Unknown"
    - Date (MM/DD/YYYY) and time (HH:MM:SS) parsing; unparseable records dropped
    - Date window filter (exclusive bounds from config)
    - Borough normalization to the MN/BX/BK/QN/SI codes; unknown codes rejected
    - Year and hour extraction

Usage:
    from shooting_report.datasets.shootings.preprocess import ShootingPreprocessor

    preprocessor = ShootingPreprocessor()
    result = preprocessor.run(raw_df, execution_date="2024-01-15")
    processed_df = preprocessor.get_data()
"""

from __future__ import annotations

import logging

import pandas as pd

from shooting_report.datasets.base import BasePreprocessor
from shooting_report.datasets.shootings.models import BOROUGH_CODES_BY_NAME, BOROUGH_NAMES
from shooting_report.shared.config import Settings, get_dataset_config
from shooting_report.shared.errors import ReportError

logger = logging.getLogger(__name__)

SCHEMA_CONFIG = get_dataset_config("shootings").get("schema", {})


class ShootingPreprocessor(BasePreprocessor):
    """
    Preprocessor for NYPD shooting incident data.

    Each rule that removes records logs its count under a drop reason so the
    result shows why the table shrank.
    """

    # Column mapping from raw export names to standardized names
    COLUMN_MAPPINGS = SCHEMA_CONFIG.get(
        "column_mappings",
        {
            "INCIDENT_KEY": "incident_key",
            "OCCUR_DATE": "occurred_date",
            "OCCUR_TIME": "occurred_time",
            "BORO": "borough",
            "VIC_RACE": "victim_race",
        },
    )

    REQUIRED_COLUMNS = [
        "occurred_date",
        "occurred_time",
        "borough",
        "victim_race",
        "year",
        "hour",
    ]

    OUTPUT_COLUMNS = [
        "incident_key",
        "occurred_date",
        "occurred_time",
        "borough",
        "victim_race",
        "year",
        "hour",
    ]

    def __init__(self, config: Settings | None = None):
        """Initialize shooting preprocessor."""
        super().__init__(config)
        self.cleaning = self.config.cleaning

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return self.REQUIRED_COLUMNS

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings."""
        return self.COLUMN_MAPPINGS

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply shooting-specific transformations.

        Args:
            df: Raw DataFrame with renamed columns

        Returns:
            Cleaned DataFrame
        """
        df = self._drop_missing_race(df)
        df = self._relabel_na_race(df)
        df = self._process_date(df)
        df = self._process_time(df)
        df = self._filter_date_window(df)
        df = self._normalize_borough(df)
        df = self._select_output_columns(df)
        return df

    def _drop_missing_race(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop records whose victim race is absent (not imputed)."""
        return self.drop_missing(df, "victim_race", reason="missing_victim_race")

    def _relabel_na_race(self, df: pd.DataFrame) -> pd.DataFrame:
        """Relabel the literal "NA" text as the unknown label."""
        df = df.copy()
        race = df["victim_race"].astype(str).str.strip()
        na_mask = race == self.cleaning.na_label
        df["victim_race"] = race.mask(na_mask, self.cleaning.unknown_label)

        if na_mask.any():
            logger.info(f"Relabeled {int(na_mask.sum())} '{self.cleaning.na_label}' victim races")
        self.log_transformation("relabel_na_victim_race")
        return df

    def _process_date(self, df: pd.DataFrame) -> pd.DataFrame:
        """Parse the occurrence date; drop records it cannot be parsed from."""
        df = df.copy()
        df["occurred_date"] = pd.to_datetime(
            df["occurred_date"], format=self.cleaning.date_format, errors="coerce"
        )

        invalid = df["occurred_date"].isna()
        if invalid.any():
            logger.warning(f"Dropping {int(invalid.sum())} records with unparseable dates")
        df = self.drop_where(df, invalid, reason="invalid_date")

        df["year"] = df["occurred_date"].dt.year.astype(int)
        self.log_transformation("process_date")
        return df

    def _process_time(self, df: pd.DataFrame) -> pd.DataFrame:
        """Parse the occurrence time; drop records it cannot be parsed from."""
        df = df.copy()
        parsed = pd.to_datetime(
            df["occurred_time"], format=self.cleaning.time_format, errors="coerce"
        )

        invalid = parsed.isna()
        if invalid.any():
            logger.warning(f"Dropping {int(invalid.sum())} records with unparseable times")

        df["occurred_time"] = parsed.dt.time
        df["hour"] = parsed.dt.hour
        df = self.drop_where(df, invalid, reason="invalid_time")
        df["hour"] = df["hour"].astype(int)

        self.log_transformation("process_time")
        return df

    def _filter_date_window(self, df: pd.DataFrame) -> pd.DataFrame:
        """Keep records strictly inside (date_start, date_end)."""
        out_of_range = ~in_date_window(df["occurred_date"], self.config)
        if out_of_range.any():
            logger.info(f"Dropping {int(out_of_range.sum())} records outside the date window")
        df = self.drop_where(df, out_of_range, reason="date_out_of_range")
        self.log_transformation("filter_date_window")
        return df

    def _normalize_borough(self, df: pd.DataFrame) -> pd.DataFrame:
        """Map borough values to codes; reject values that are not a known borough."""
        df = df.copy()
        raw = df["borough"].astype(str).str.strip().str.upper()
        codes = raw.where(raw.isin(list(BOROUGH_NAMES)), raw.map(BOROUGH_CODES_BY_NAME))

        unknown = codes.isna()
        if unknown.any():
            bad_values = sorted(df.loc[unknown, "borough"].astype(str).unique())
            logger.error(
                f"Rejecting {int(unknown.sum())} records with unknown borough codes: {bad_values}",
                extra={"unknown_boroughs": bad_values},
            )

        df["borough"] = codes
        df = self.drop_where(df, unknown, reason="unknown_borough")
        self.log_transformation("normalize_borough")
        return df

    def _select_output_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Select and order output columns."""
        available_columns = [c for c in self.OUTPUT_COLUMNS if c in df.columns]
        df = df[available_columns].reset_index(drop=True)

        self.log_transformation("select_output_columns")
        return df


def in_date_window(dates: pd.Series, config: Settings) -> pd.Series:
    """Boolean mask of dates strictly inside the configured cleaning window."""
    start = pd.Timestamp(config.cleaning.date_start)
    end = pd.Timestamp(config.cleaning.date_end)
    return (dates > start) & (dates < end)


# =============================================================================
# Convenience Functions
# =============================================================================


def preprocess_shooting_data(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> pd.DataFrame:
    """
    Convenience function for preprocessing shooting data.

    Raises:
        ReportError: if preprocessing fails
    """
    preprocessor = ShootingPreprocessor(config)
    result = preprocessor.run(df, execution_date)
    if not result.success:
        raise ReportError(f"Preprocessing failed: {result.error_message}")
    return preprocessor.get_data()
