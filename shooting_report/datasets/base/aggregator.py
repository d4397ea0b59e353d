"""
NYC Shooting Report - Base Aggregator

Abstract base class for dataset aggregators. Provides a consistent interface
for building report tables with:
- Two-level proportion computation (normalization scope vs. inner dimension)
- Per-table statistics
- Table validation against definitions

Usage:
    class ShootingAggregator(BaseAggregator):
        def build_tables(self, df: pd.DataFrame) -> dict[str, pd.DataFrame]:
            ...
        def get_table_definitions(self) -> list[TableDefinition]:
            ...
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from shooting_report.shared.config import Settings, get_config

logger = logging.getLogger(__name__)

COUNT_COLUMN = "count"
PROPORTION_COLUMN = "proportion"

# Tolerance when checking that proportions within a scope sum to 100
PROPORTION_TOLERANCE = 1e-6


@dataclass
class TableDefinition:
    """Definition of an aggregate table."""

    name: str
    description: str
    scope: list[str]
    dimension: str
    date_filtered: bool = False

    @property
    def columns(self) -> list[str]:
        """Key columns followed by the count and proportion columns."""
        return [*self.scope, self.dimension, COUNT_COLUMN, PROPORTION_COLUMN]


@dataclass
class AggregationResult:
    """Result of an aggregation operation."""

    dataset: str
    execution_date: str
    rows_input: int
    tables_built: int
    table_rows: dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    table_stats: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "tables_built": self.tables_built,
            "table_rows": self.table_rows,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "table_stats": self.table_stats,
        }


def compute_proportions(
    df: pd.DataFrame,
    scope: list[str],
    dimension: str,
) -> pd.DataFrame:
    """
    Count records per (scope, dimension) key and normalize within each scope.

    The proportion of a row is its count divided by the total count of all rows
    sharing the same scope values, times 100. Normalization is never global:
    for a scope of ``["borough"]`` every borough's proportions sum to 100 on
    their own.

    Args:
        df: Input records
        scope: Columns defining the normalization scope (e.g. ["borough", "year"])
        dimension: Inner category column (e.g. "time_category")

    Returns:
        DataFrame with columns scope + [dimension, "count", "proportion"].
        Only observed keys produce rows, so an empty scope yields no rows.
    """
    keys = [*scope, dimension]
    columns = [*keys, COUNT_COLUMN, PROPORTION_COLUMN]

    if len(df) == 0:
        return pd.DataFrame(columns=columns)

    counts = df.groupby(keys, observed=True, sort=True).size().reset_index(name=COUNT_COLUMN)
    counts = counts[counts[COUNT_COLUMN] > 0]

    totals = counts.groupby(scope, observed=True)[COUNT_COLUMN].transform("sum")
    counts[PROPORTION_COLUMN] = counts[COUNT_COLUMN] / totals * 100
    counts[COUNT_COLUMN] = counts[COUNT_COLUMN].astype(int)

    return counts[columns].reset_index(drop=True)


class BaseAggregator(ABC):
    """
    Abstract base class for report table building.

    Subclasses must implement:
    - build_tables(): Compute the aggregate tables from processed data
    - get_dataset_name(): Return the dataset name
    - get_table_definitions(): Return list of table definitions
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the aggregator.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._table_stats: dict[str, dict[str, Any]] = {}

    @abstractmethod
    def build_tables(self, df: pd.DataFrame) -> dict[str, pd.DataFrame]:
        """
        Build aggregate tables from processed data.

        Args:
            df: Processed and categorized DataFrame

        Returns:
            Mapping of table name to aggregate DataFrame
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """Get the dataset name."""
        pass

    @abstractmethod
    def get_table_definitions(self) -> list[TableDefinition]:
        """Get list of table definitions."""
        pass

    def run(
        self,
        df: pd.DataFrame,
        execution_date: str,
    ) -> AggregationResult:
        """
        Run the aggregation pipeline.

        Args:
            df: Processed DataFrame
            execution_date: Report date in YYYY-MM-DD format

        Returns:
            AggregationResult with details about the tables built
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)

        logger.info(
            f"Starting aggregation for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            self._table_stats = {}

            tables = self.build_tables(df)

            self._compute_table_stats(tables)
            self._validate_tables(tables)

            duration = time.time() - start_time

            result = AggregationResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                tables_built=len(tables),
                table_rows={name: len(table) for name, table in tables.items()},
                duration_seconds=duration,
                success=True,
                table_stats=self._table_stats,
            )

            logger.info(
                f"Aggregation complete for {dataset_name}: {len(tables)} tables",
                extra=result.to_dict(),
            )

            self._data = tables

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Aggregation failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return AggregationResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                tables_built=0,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
            )

    def get_data(self) -> dict[str, pd.DataFrame] | None:
        """Get the most recently built tables."""
        return getattr(self, "_data", None)

    def _compute_table_stats(self, tables: dict[str, pd.DataFrame]) -> None:
        """Compute summary statistics for each table."""
        for name, table in tables.items():
            stats: dict[str, Any] = {
                "rows": len(table),
                "total_count": int(table[COUNT_COLUMN].sum()) if len(table) else 0,
            }
            if len(table) > 0:
                stats["max_proportion"] = float(table[PROPORTION_COLUMN].max())
                stats["min_proportion"] = float(table[PROPORTION_COLUMN].min())
            self._table_stats[name] = stats

    def _validate_tables(self, tables: dict[str, pd.DataFrame]) -> None:
        """Validate tables against definitions."""
        definitions = {d.name: d for d in self.get_table_definitions()}

        for name, table in tables.items():
            defn = definitions.get(name)
            if defn is None:
                continue

            missing = [c for c in defn.columns if c not in table.columns]
            if missing:
                raise ValueError(f"Table '{name}' is missing columns: {missing}")

            if len(table) == 0:
                logger.warning(f"Table '{name}' is empty")
                continue

            sums = table.groupby(defn.scope, observed=True)[PROPORTION_COLUMN].sum()
            off = sums[~np.isclose(sums, 100.0, rtol=0, atol=PROPORTION_TOLERANCE)]
            if len(off) > 0:
                logger.warning(
                    f"Table '{name}' has {len(off)} scopes whose proportions do not sum to 100"
                )
