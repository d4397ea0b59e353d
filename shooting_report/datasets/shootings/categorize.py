"""
NYC Shooting Report - Time-of-Day Categorizer

Buckets each incident by the hour it occurred:

    [5, 11)  -> Morning
    [11, 16) -> Afternoon
    [16, 21) -> Evening
    otherwise -> Late Night  ([21, 24) and [0, 5))

Bounds are half-open on the lower side, so hour 5 is Morning and hour 11 is
Afternoon.
"""

from __future__ import annotations

import logging

import pandas as pd

from shooting_report.datasets.shootings.models import TIME_CATEGORY_ORDER, TimeCategory

logger = logging.getLogger(__name__)

# (start hour inclusive, end hour exclusive, category)
TIME_BUCKETS: list[tuple[int, int, TimeCategory]] = [
    (5, 11, TimeCategory.MORNING),
    (11, 16, TimeCategory.AFTERNOON),
    (16, 21, TimeCategory.EVENING),
]

# Half-open [left, right) edges covering 0..23 for the vectorized path; Late
# Night appears twice because it wraps around midnight
HOUR_EDGES: list[int] = [0, 5, 11, 16, 21, 24]
HOUR_EDGE_LABELS: list[str] = [
    TimeCategory.LATE_NIGHT.value,
    TimeCategory.MORNING.value,
    TimeCategory.AFTERNOON.value,
    TimeCategory.EVENING.value,
    TimeCategory.LATE_NIGHT.value,
]


def categorize_hour(hour: int) -> TimeCategory:
    """Return the time-of-day category for an hour in 0..23."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be in 0..23, got {hour}")

    for start, end, category in TIME_BUCKETS:
        if start <= hour < end:
            return category
    return TimeCategory.LATE_NIGHT


def add_time_category(
    df: pd.DataFrame,
    hour_col: str = "hour",
    output_col: str = "time_category",
) -> pd.DataFrame:
    """
    Return a copy of ``df`` with a time-of-day category column.

    Buckets are assigned with ``pd.cut`` over HOUR_EDGES, which agree with
    categorize_hour hour for hour.

    Raises:
        ValueError: if any hour is missing or outside 0..23. Records with an
            unparseable time must be dropped before categorizing.
    """
    hours = df[hour_col]
    if hours.isna().any():
        raise ValueError(f"{int(hours.isna().sum())} records have no {hour_col}")
    if len(hours) > 0 and ((hours < 0) | (hours > 23)).any():
        raise ValueError(f"{hour_col} values must be in 0..23")

    out = df.copy()
    buckets = pd.cut(
        hours.astype(int),
        bins=HOUR_EDGES,
        right=False,
        labels=HOUR_EDGE_LABELS,
        ordered=False,
    )
    out[output_col] = pd.Categorical(
        buckets.astype(str), categories=TIME_CATEGORY_ORDER, ordered=True
    )

    logger.debug(
        "Assigned time categories",
        extra={"counts": out[output_col].value_counts().to_dict()},
    )
    return out
