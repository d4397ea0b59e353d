"""
NYC Shooting Report - Report Pipeline

Runs the report once, top to bottom:

    Loader -> Cleaner -> Categorizer -> Aggregator -> Renderer

Each stage returns a new table; a failed stage stops the run with a
ReportError carrying the stage's error message.

Usage:
    from shooting_report.pipeline import run_report

    report = run_report(execution_date="2024-01-15", output_dir="output")
    report.tables["race_by_borough"]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd

from shooting_report.datasets.base import AggregationResult, IngestionResult, PreprocessingResult
from shooting_report.datasets.shootings import (
    ShootingAggregator,
    ShootingIngester,
    ShootingPreprocessor,
    add_time_category,
)
from shooting_report.report import RenderResult, ReportRenderer
from shooting_report.shared.config import Settings, get_config
from shooting_report.shared.errors import DataQualityError, ReportError, SchemaError
from shooting_report.validation import SchemaEnforcer

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """Everything a report run produced."""

    execution_date: str
    ingestion: IngestionResult
    preprocessing: PreprocessingResult
    aggregation: AggregationResult
    rendering: RenderResult | None = None
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "execution_date": self.execution_date,
            "ingestion": self.ingestion.to_dict(),
            "preprocessing": self.preprocessing.to_dict(),
            "aggregation": self.aggregation.to_dict(),
            "rendering": self.rendering.to_dict() if self.rendering else None,
        }


def run_report(
    execution_date: str | None = None,
    source_path: str | Path | None = None,
    output_dir: str | Path | None = None,
    config: Settings | None = None,
    render: bool = True,
) -> ReportResult:
    """
    Run the shooting report.

    Args:
        execution_date: Report date label (defaults to today)
        source_path: Local CSV to read instead of the remote source
        output_dir: Artifact directory (defaults to report.output_dir)
        config: Configuration object (uses default if not provided)
        render: Write artifacts when True; only compute tables otherwise

    Returns:
        ReportResult with stage results and aggregate tables

    Raises:
        SchemaError: if the raw table is missing required columns
        ReportError: if a stage fails
        DataQualityError: if the cleaned table violates a cleaning invariant
    """
    config = config or get_config()
    execution_date = execution_date or date.today().isoformat()
    enforcer = SchemaEnforcer(config)

    logger.info(f"Starting shooting report for {execution_date}")

    ingester = ShootingIngester(config)
    ingestion = ingester.run(execution_date, path=source_path)
    if not ingestion.success:
        if ingestion.missing_columns:
            raise SchemaError(
                f"Ingestion failed: {ingestion.error_message}",
                missing_columns=ingestion.missing_columns,
            )
        raise ReportError(f"Ingestion failed: {ingestion.error_message}")
    raw = ingester.get_data()

    raw_check = enforcer.validate_raw(raw, ingester.get_dataset_name())
    if not raw_check.is_valid:
        raise SchemaError(
            f"Raw data failed validation: {raw_check.errors}",
            missing_columns=raw_check.missing_columns,
        )

    preprocessor = ShootingPreprocessor(config)
    preprocessing = preprocessor.run(raw, execution_date)
    if not preprocessing.success:
        raise ReportError(f"Preprocessing failed: {preprocessing.error_message}")
    cleaned = preprocessor.get_data()

    validation = enforcer.validate_processed(cleaned)
    if not validation.is_valid:
        raise DataQualityError(f"Cleaned data failed validation: {validation.errors}")

    categorized = add_time_category(cleaned)

    aggregator = ShootingAggregator(config)
    aggregation = aggregator.run(categorized, execution_date)
    if not aggregation.success:
        raise ReportError(f"Aggregation failed: {aggregation.error_message}")
    tables = aggregator.get_data()

    for defn in aggregator.get_table_definitions():
        check = enforcer.validate_aggregate(tables[defn.name], defn.scope, name=defn.name)
        if not check.is_valid:
            raise DataQualityError(f"Table '{defn.name}' failed validation: {check.errors}")

    report = ReportResult(
        execution_date=execution_date,
        ingestion=ingestion,
        preprocessing=preprocessing,
        aggregation=aggregation,
        tables=tables,
    )

    if render:
        report.rendering = ReportRenderer(config).render(tables, output_dir=output_dir)
        if not report.rendering.success:
            raise ReportError(f"Rendering failed: {report.rendering.error_message}")

    logger.info(
        f"Shooting report complete: {preprocessing.rows_output} records, {len(tables)} tables",
        extra=report.to_dict(),
    )
    return report
