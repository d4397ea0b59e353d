"""
NYC Shooting Report - Base Classes for Datasets

Abstract base classes that dataset implementations inherit from.
These provide a consistent interface for:
- Data ingestion (BaseIngester)
- Data preprocessing (BasePreprocessor)
- Report table building (BaseAggregator)

Usage:
    from shooting_report.datasets.base import BaseIngester, BasePreprocessor, BaseAggregator

    class ShootingIngester(BaseIngester):
        def fetch_data(self, path=None) -> pd.DataFrame:
            ...
"""

from shooting_report.datasets.base.aggregator import (
    AggregationResult,
    BaseAggregator,
    TableDefinition,
    compute_proportions,
)
from shooting_report.datasets.base.ingester import BaseIngester, IngestionResult
from shooting_report.datasets.base.preprocessor import BasePreprocessor, PreprocessingResult

__all__ = [
    "BaseIngester",
    "IngestionResult",
    "BasePreprocessor",
    "PreprocessingResult",
    "BaseAggregator",
    "AggregationResult",
    "TableDefinition",
    "compute_proportions",
]
