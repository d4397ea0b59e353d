"""
NYC Shooting Report - Shooting Incident Models

Typed views over cleaned incident rows and aggregate rows, plus the static
lookup tables the report is built around.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import StrEnum
from typing import Any

import pandas as pd

# Borough code -> display name
BOROUGH_NAMES: dict[str, str] = {
    "MN": "Manhattan",
    "BX": "Bronx",
    "BK": "Brooklyn",
    "QN": "Queens",
    "SI": "Staten Island",
}

# Upper-cased display name -> code; the NYPD export spells boroughs out
BOROUGH_CODES_BY_NAME: dict[str, str] = {
    name.upper(): code for code, name in BOROUGH_NAMES.items()
}


class TimeCategory(StrEnum):
    """Time-of-day bucket."""

    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"
    LATE_NIGHT = "Late Night"


TIME_CATEGORY_ORDER: list[str] = [c.value for c in TimeCategory]


def borough_lookup_table() -> pd.DataFrame:
    """Return the borough code/name lookup as a two-column table."""
    return pd.DataFrame(
        {"code": list(BOROUGH_NAMES.keys()), "borough": list(BOROUGH_NAMES.values())}
    )


@dataclass(frozen=True)
class IncidentRecord:
    """One cleaned and categorized shooting incident."""

    incident_key: str
    occurred_date: date
    occurred_time: time
    borough: str
    victim_race: str
    time_category: TimeCategory
    year: int
    hour: int

    @property
    def borough_name(self) -> str:
        return BOROUGH_NAMES[self.borough]

    @classmethod
    def from_row(cls, row: dict[str, Any] | pd.Series) -> IncidentRecord:
        """Build a record from a cleaned, categorized DataFrame row."""
        occurred_date = row["occurred_date"]
        if isinstance(occurred_date, pd.Timestamp):
            occurred_date = occurred_date.date()

        incident_key = row.get("incident_key", "")
        return cls(
            incident_key="" if pd.isna(incident_key) else str(incident_key),
            occurred_date=occurred_date,
            occurred_time=row["occurred_time"],
            borough=row["borough"],
            victim_race=row["victim_race"],
            time_category=TimeCategory(row["time_category"]),
            year=int(row["year"]),
            hour=int(row["hour"]),
        )


@dataclass(frozen=True)
class AggregateRow:
    """One row of an aggregate table: grouping keys plus count and proportion."""

    keys: dict[str, Any] = field(hash=False)
    count: int
    proportion: float


def to_records(df: pd.DataFrame) -> list[IncidentRecord]:
    """Convert a cleaned, categorized frame to typed records."""
    return [IncidentRecord.from_row(row) for _, row in df.iterrows()]


def to_aggregate_rows(table: pd.DataFrame) -> list[AggregateRow]:
    """Convert an aggregate table to typed rows."""
    key_columns = [c for c in table.columns if c not in ("count", "proportion", "borough_name")]
    return [
        AggregateRow(
            keys={c: row[c] for c in key_columns},
            count=int(row["count"]),
            proportion=float(row["proportion"]),
        )
        for _, row in table.iterrows()
    ]
