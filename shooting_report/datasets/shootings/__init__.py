"""
NYC Shooting Report - Shooting Incident Dataset

Components:
    - ShootingIngester: Fetches the incident CSV from NYC Open Data
    - ShootingPreprocessor: Cleans and validates incident records
    - add_time_category / categorize_hour: Time-of-day buckets
    - ShootingAggregator: Per-borough proportion tables

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Usage:
    from shooting_report.datasets.shootings import (
        ShootingAggregator,
        ShootingIngester,
        ShootingPreprocessor,
        add_time_category,
    )

    ingester = ShootingIngester()
    ingester.run(execution_date="2024-01-15")

    preprocessor = ShootingPreprocessor()
    preprocessor.run(ingester.get_data(), execution_date="2024-01-15")

    categorized = add_time_category(preprocessor.get_data())

    aggregator = ShootingAggregator()
    aggregator.run(categorized, execution_date="2024-01-15")
    tables = aggregator.get_data()
"""

from shooting_report.datasets.shootings.aggregate import (
    ShootingAggregator,
    aggregate_shooting_data,
)
from shooting_report.datasets.shootings.categorize import add_time_category, categorize_hour
from shooting_report.datasets.shootings.ingest import ShootingIngester, ingest_shooting_data
from shooting_report.datasets.shootings.models import (
    BOROUGH_NAMES,
    TIME_CATEGORY_ORDER,
    AggregateRow,
    IncidentRecord,
    TimeCategory,
    borough_lookup_table,
    to_aggregate_rows,
    to_records,
)
from shooting_report.datasets.shootings.preprocess import (
    ShootingPreprocessor,
    preprocess_shooting_data,
)

__all__ = [
    "ShootingIngester",
    "ShootingPreprocessor",
    "ShootingAggregator",
    "ingest_shooting_data",
    "preprocess_shooting_data",
    "aggregate_shooting_data",
    "add_time_category",
    "categorize_hour",
    "BOROUGH_NAMES",
    "TIME_CATEGORY_ORDER",
    "TimeCategory",
    "IncidentRecord",
    "AggregateRow",
    "borough_lookup_table",
    "to_records",
    "to_aggregate_rows",
]
