"""
NYC Shooting Report - Shooting Incident Aggregator

Builds the report tables from cleaned, categorized incidents.

Tables:
    - race_by_borough: victim race proportions within each borough
    - time_of_day_by_borough: time-of-day proportions within each borough
    - time_of_day_by_borough_year: time-of-day proportions within each
      borough and year, restricted to the configured date window

Usage:
    from shooting_report.datasets.shootings.aggregate import ShootingAggregator

    aggregator = ShootingAggregator()
    result = aggregator.run(categorized_df, execution_date="2024-01-15")
    tables = aggregator.get_data()
"""

from __future__ import annotations

import logging

import pandas as pd

from shooting_report.datasets.base import BaseAggregator, TableDefinition, compute_proportions
from shooting_report.datasets.shootings.models import BOROUGH_NAMES, TIME_CATEGORY_ORDER
from shooting_report.datasets.shootings.preprocess import in_date_window
from shooting_report.shared.config import Settings
from shooting_report.shared.errors import ReportError

logger = logging.getLogger(__name__)

RACE_BY_BOROUGH = "race_by_borough"
TIME_OF_DAY_BY_BOROUGH = "time_of_day_by_borough"
TIME_OF_DAY_BY_BOROUGH_YEAR = "time_of_day_by_borough_year"


class ShootingAggregator(BaseAggregator):
    """Aggregator for NYPD shooting incident data."""

    def __init__(self, config: Settings | None = None):
        """Initialize shooting aggregator."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_table_definitions(self) -> list[TableDefinition]:
        """Return table definitions."""
        return [
            TableDefinition(
                name=RACE_BY_BOROUGH,
                description="Share of victims by race within each borough",
                scope=["borough"],
                dimension="victim_race",
            ),
            TableDefinition(
                name=TIME_OF_DAY_BY_BOROUGH,
                description="Share of incidents by time of day within each borough",
                scope=["borough"],
                dimension="time_category",
            ),
            TableDefinition(
                name=TIME_OF_DAY_BY_BOROUGH_YEAR,
                description="Share of incidents by time of day within each borough and year",
                scope=["borough", "year"],
                dimension="time_category",
                date_filtered=True,
            ),
        ]

    def build_tables(self, df: pd.DataFrame) -> dict[str, pd.DataFrame]:
        """
        Build the report tables.

        Args:
            df: Cleaned DataFrame carrying a time_category column

        Returns:
            Mapping of table name to aggregate table
        """
        logger.info(f"Building shooting tables from {len(df)} records")

        tables = {}
        for defn in self.get_table_definitions():
            source = df
            if defn.date_filtered:
                source = df[in_date_window(df["occurred_date"], self.config)]
                excluded = len(df) - len(source)
                if excluded > 0:
                    logger.info(
                        f"Excluded {excluded} records outside the date window from {defn.name}"
                    )

            table = compute_proportions(source, defn.scope, defn.dimension)
            tables[defn.name] = self._finalize_table(table, defn)

        return tables

    def _finalize_table(self, table: pd.DataFrame, defn: TableDefinition) -> pd.DataFrame:
        """Attach borough display names and sort by scope then dimension order."""
        table = table.copy()

        unknown = set(table["borough"]) - set(BOROUGH_NAMES)
        if unknown:
            raise ReportError(f"Table '{defn.name}' has unmapped borough codes: {sorted(unknown)}")
        table["borough_name"] = table["borough"].map(BOROUGH_NAMES)

        if defn.dimension == "time_category":
            table[defn.dimension] = pd.Categorical(
                table[defn.dimension].astype(str), categories=TIME_CATEGORY_ORDER, ordered=True
            )

        if "year" in defn.scope:
            table["year"] = table["year"].astype(int)

        sort_keys = [*defn.scope, defn.dimension]
        table = table.sort_values(sort_keys).reset_index(drop=True)

        columns = [
            defn.scope[0],
            "borough_name",
            *defn.scope[1:],
            defn.dimension,
            "count",
            "proportion",
        ]
        return table[columns]


# =============================================================================
# Convenience Functions
# =============================================================================


def aggregate_shooting_data(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, pd.DataFrame]:
    """
    Convenience function for building the shooting report tables.

    Raises:
        ReportError: if aggregation fails
    """
    aggregator = ShootingAggregator(config)
    result = aggregator.run(df, execution_date)
    if not result.success:
        raise ReportError(f"Aggregation failed: {result.error_message}")
    return aggregator.get_data()
