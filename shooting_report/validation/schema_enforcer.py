"""
NYC Shooting Report - Schema Enforcer

Three-stage validation for the report tables:
1. Raw data validation: required columns, non-empty, null ratios
2. Processed data validation: cleaning invariants (race present, known
   boroughs, dates inside the window)
3. Aggregate validation: proportions in range and summing to 100 per scope

Usage:
    enforcer = SchemaEnforcer(config)

    result = enforcer.validate_processed(df, dataset="shootings")
    if not result.is_valid:
        raise DataQualityError(result.errors)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

import numpy as np
import pandas as pd

from shooting_report.datasets.base.aggregator import (
    COUNT_COLUMN,
    PROPORTION_COLUMN,
    PROPORTION_TOLERANCE,
)
from shooting_report.datasets.shootings.models import BOROUGH_NAMES
from shooting_report.shared.config import Settings, get_config, get_dataset_config

logger = logging.getLogger(__name__)


class ValidationLevel(StrEnum):
    """Validation severity level."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationStage(StrEnum):
    """Data validation stage."""

    RAW = "raw"
    PROCESSED = "processed"
    AGGREGATE = "aggregate"


@dataclass
class ValidationIssue:
    """Individual validation issue."""

    level: ValidationLevel
    stage: ValidationStage
    check: str  # Name of the check that failed
    message: str
    column: str | None = None
    count: int | None = None
    percentage: float | None = None


@dataclass
class ValidationResult:
    """Result of validation checks."""

    dataset: str
    stage: ValidationStage
    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    row_count: int = 0
    column_count: int = 0
    validated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def errors(self) -> list[str]:
        """Get list of error messages."""
        return [
            issue.message
            for issue in self.issues
            if issue.level in (ValidationLevel.ERROR, ValidationLevel.CRITICAL)
        ]

    @property
    def warnings(self) -> list[str]:
        """Get list of warning messages."""
        return [issue.message for issue in self.issues if issue.level == ValidationLevel.WARNING]

    @property
    def has_errors(self) -> bool:
        """Check if result has any errors."""
        return len(self.errors) > 0

    @property
    def missing_columns(self) -> list[str]:
        """Columns reported missing by the required-column check."""
        return [
            issue.column
            for issue in self.issues
            if issue.check == "required_column" and issue.column is not None
        ]

    def add(self, issue: ValidationIssue) -> None:
        """Record an issue, invalidating the result for errors."""
        self.issues.append(issue)
        if issue.level in (ValidationLevel.ERROR, ValidationLevel.CRITICAL):
            self.is_valid = False


class SchemaEnforcer:
    """
    Three-stage validation enforcer.

    Validates data at three stages:
    - Raw: required columns + basic quality
    - Processed: cleaning invariants
    - Aggregate: proportion invariants
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize schema enforcer.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @staticmethod
    def get_required_columns(dataset: str) -> list[str]:
        """Raw columns the dataset's schema config declares as required."""
        schema = get_dataset_config(dataset).get("schema", {})
        return list(schema.get("required_columns", []))

    def validate_raw(self, df: pd.DataFrame, dataset: str = "shootings") -> ValidationResult:
        """
        Validate raw data.

        Checks:
        - Required columns present
        - Dataset non-empty
        - Null ratio per required column (informational; nulls are filtered later)

        Required columns come from configs/datasets/<dataset>.yaml.
        """
        required = self.get_required_columns(dataset)
        result = ValidationResult(
            dataset=dataset,
            stage=ValidationStage.RAW,
            is_valid=True,
            row_count=len(df),
            column_count=len(df.columns),
        )

        for col in required:
            if col not in df.columns:
                result.add(
                    ValidationIssue(
                        level=ValidationLevel.CRITICAL,
                        stage=ValidationStage.RAW,
                        check="required_column",
                        message=f"Required column '{col}' not found",
                        column=col,
                    )
                )

        if len(df) == 0:
            result.add(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    stage=ValidationStage.RAW,
                    check="min_row_count",
                    message="DataFrame is empty",
                    count=0,
                )
            )
        else:
            for col in required:
                if col not in df.columns:
                    continue
                null_count = int(df[col].isna().sum())
                if null_count > 0:
                    result.add(
                        ValidationIssue(
                            level=ValidationLevel.INFO,
                            stage=ValidationStage.RAW,
                            check="null_ratio",
                            message=f"Column '{col}' has {null_count} null values",
                            column=col,
                            count=null_count,
                            percentage=null_count / len(df),
                        )
                    )

        self._log_result(result)
        return result

    def validate_processed(
        self, df: pd.DataFrame, dataset: str = "shootings"
    ) -> ValidationResult:
        """
        Validate processed data.

        Checks:
        - Victim race non-null
        - Every borough code is in the lookup table
        - Occurrence dates strictly inside the cleaning window
        """
        result = ValidationResult(
            dataset=dataset,
            stage=ValidationStage.PROCESSED,
            is_valid=True,
            row_count=len(df),
            column_count=len(df.columns),
        )

        if "victim_race" in df.columns:
            null_count = int(df["victim_race"].isna().sum())
            if null_count > 0:
                result.add(
                    ValidationIssue(
                        level=ValidationLevel.ERROR,
                        stage=ValidationStage.PROCESSED,
                        check="victim_race_not_null",
                        message=f"{null_count} records have no victim race",
                        column="victim_race",
                        count=null_count,
                    )
                )

        if "borough" in df.columns:
            unknown = ~df["borough"].isin(list(BOROUGH_NAMES))
            if unknown.any():
                result.add(
                    ValidationIssue(
                        level=ValidationLevel.ERROR,
                        stage=ValidationStage.PROCESSED,
                        check="known_borough",
                        message=f"{int(unknown.sum())} records have unmapped borough codes",
                        column="borough",
                        count=int(unknown.sum()),
                    )
                )

        self._validate_temporal_bounds(df, result)

        self._log_result(result)
        return result

    def validate_aggregate(
        self,
        table: pd.DataFrame,
        scope: list[str],
        name: str = "aggregate",
    ) -> ValidationResult:
        """
        Validate an aggregate table.

        Checks:
        - Counts non-negative
        - Proportions within [0, 100]
        - Proportions sum to 100 within each scope
        """
        result = ValidationResult(
            dataset=name,
            stage=ValidationStage.AGGREGATE,
            is_valid=True,
            row_count=len(table),
            column_count=len(table.columns),
        )

        if len(table) == 0:
            self._log_result(result)
            return result

        if (table[COUNT_COLUMN] < 0).any():
            result.add(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    stage=ValidationStage.AGGREGATE,
                    check="count_non_negative",
                    message="Negative counts found",
                    column=COUNT_COLUMN,
                )
            )

        proportions = table[PROPORTION_COLUMN]
        if ((proportions < 0) | (proportions > 100 + PROPORTION_TOLERANCE)).any():
            result.add(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    stage=ValidationStage.AGGREGATE,
                    check="proportion_range",
                    message="Proportions outside [0, 100] found",
                    column=PROPORTION_COLUMN,
                )
            )

        sums = table.groupby(scope, observed=True)[PROPORTION_COLUMN].sum()
        off = sums[~np.isclose(sums, 100.0, rtol=0, atol=PROPORTION_TOLERANCE)]
        if len(off) > 0:
            result.add(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    stage=ValidationStage.AGGREGATE,
                    check="proportion_sum",
                    message=f"{len(off)} scopes have proportions not summing to 100",
                    column=PROPORTION_COLUMN,
                    count=len(off),
                )
            )

        self._log_result(result)
        return result

    def _validate_temporal_bounds(self, df: pd.DataFrame, result: ValidationResult) -> None:
        """Check occurrence dates sit strictly inside the cleaning window."""
        if "occurred_date" not in df.columns or len(df) == 0:
            return

        dates = pd.to_datetime(df["occurred_date"], errors="coerce")
        start = pd.Timestamp(self.config.cleaning.date_start)
        end = pd.Timestamp(self.config.cleaning.date_end)
        outside = dates.isna() | (dates <= start) | (dates >= end)

        if outside.any():
            result.add(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    stage=result.stage,
                    check="date_window",
                    message=(
                        f"{int(outside.sum())} records fall outside "
                        f"({self.config.cleaning.date_start}, {self.config.cleaning.date_end})"
                    ),
                    column="occurred_date",
                    count=int(outside.sum()),
                )
            )

    def _log_result(self, result: ValidationResult) -> None:
        logger.info(
            f"{result.stage.value.title()} validation for {result.dataset}: "
            f"{'PASSED' if result.is_valid else 'FAILED'}",
            extra={
                "dataset": result.dataset,
                "is_valid": result.is_valid,
                "issues_count": len(result.issues),
            },
        )
