"""
NYC Shooting Report - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Sample raw and cleaned incident frames
- Mock fixtures for the remote source
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import matplotlib
import pandas as pd
import pytest

# Set test environment
os.environ["SR_ENVIRONMENT"] = "dev"
matplotlib.use("Agg")

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from shooting_report.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def sample_raw_data() -> pd.DataFrame:
    """Raw rows in the NYC Open Data export layout (all text)."""
    return pd.DataFrame(
        {
            "INCIDENT_KEY": ["1001", "1002", "1003", "1004", "1005", "1006"],
            "OCCUR_DATE": [
                "01/15/2019",
                "03/02/2019",
                "07/04/2020",
                "11/30/2021",
                "05/05/2022",
                "12/31/2022",
            ],
            "OCCUR_TIME": [
                "04:30:00",
                "05:00:00",
                "11:00:00",
                "16:15:00",
                "21:00:00",
                "23:59:59",
            ],
            "BORO": ["BROOKLYN", "BK", "BRONX", "QUEENS", "MANHATTAN", "STATEN ISLAND"],
            "VIC_RACE": [
                "BLACK",
                "WHITE",
                "NA",
                "BLACK HISPANIC",
                "ASIAN / PACIFIC ISLANDER",
                "BLACK",
            ],
            "PRECINCT": ["75", "73", "44", "113", "28", "120"],
        }
    )


@pytest.fixture
def sample_categorized_data() -> pd.DataFrame:
    """Cleaned, categorized incidents across two boroughs and two years."""
    rows = [
        # borough, date, hour, race
        ("BK", "2020-01-10", 4, "BLACK"),
        ("BK", "2020-02-11", 9, "BLACK"),
        ("BK", "2020-03-12", 13, "WHITE"),
        ("BK", "2021-04-13", 18, "BLACK"),
        ("BK", "2021-05-14", 22, "WHITE HISPANIC"),
        ("BX", "2020-06-15", 6, "BLACK HISPANIC"),
        ("BX", "2020-07-16", 12, "BLACK"),
        ("BX", "2021-08-17", 17, "BLACK"),
        ("BX", "2021-09-18", 23, "Unknown"),
    ]
    from shooting_report.datasets.shootings.categorize import add_time_category

    df = pd.DataFrame(rows, columns=["borough", "occurred_date", "hour", "victim_race"])
    df["occurred_date"] = pd.to_datetime(df["occurred_date"])
    df["year"] = df["occurred_date"].dt.year
    return add_time_category(df)


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def sample_csv_text(sample_raw_data: pd.DataFrame) -> str:
    """The raw sample rendered as the CSV body the export endpoint returns."""
    return sample_raw_data.to_csv(index=False)


@pytest.fixture
def mock_open_data_api(mocker: Any, sample_csv_text: str) -> Any:
    """Mock the NYC Open Data CSV download."""
    mock_response = mocker.MagicMock()
    mock_response.status_code = 200
    mock_response.text = sample_csv_text
    mocker.patch(
        "shooting_report.datasets.shootings.ingest.requests.get",
        return_value=mock_response,
    )
    return mock_response


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
