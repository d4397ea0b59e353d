"""
Unit tests for ShootingIngester.

Tests loading the incident CSV from NYC Open Data or a local file.
"""

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from shooting_report.datasets.shootings.ingest import ShootingIngester, ingest_shooting_data
from shooting_report.shared.errors import ReportError


class TestShootingIngester:
    """Test cases for ShootingIngester class."""

    @pytest.fixture
    def ingester(self):
        """Create a ShootingIngester instance."""
        return ShootingIngester()

    def test_get_dataset_name(self, ingester):
        assert ingester.get_dataset_name() == "shootings"

    def test_get_required_columns(self, ingester):
        required = ingester.get_required_columns()
        assert set(required) == {"OCCUR_DATE", "OCCUR_TIME", "BORO", "VIC_RACE"}

    def test_url_from_config(self, ingester, test_config):
        assert ingester.url == test_config.source.url
        assert "833y-fsy8" in ingester.url

    def test_fetch_data_downloads_csv(self, ingester, mock_open_data_api):
        df = ingester.fetch_data()

        assert len(df) == 6
        assert "OCCUR_DATE" in df.columns

    def test_fetch_data_keeps_literal_na(self, ingester, mock_open_data_api):
        """The "NA" race label must not be read as a missing value."""
        df = ingester.fetch_data()

        assert df.loc[2, "VIC_RACE"] == "NA"
        assert df["VIC_RACE"].notna().all()

    def test_fetch_data_empty_cells_are_missing(self, ingester):
        csv_text = (
            "OCCUR_DATE,OCCUR_TIME,BORO,VIC_RACE\n"
            "01/15/2019,04:30:00,BROOKLYN,\n"
            "01/16/2019,05:30:00,BRONX,(null)\n"
        )
        mock_response = MagicMock(status_code=200, text=csv_text)

        with patch(
            "shooting_report.datasets.shootings.ingest.requests.get",
            return_value=mock_response,
        ):
            df = ingester.fetch_data()

        assert df["VIC_RACE"].isna().all()

    def test_fetch_data_reads_as_text(self, ingester, mock_open_data_api):
        df = ingester.fetch_data()

        assert df["INCIDENT_KEY"].iloc[0] == "1001"
        assert df["OCCUR_TIME"].iloc[0] == "04:30:00"

    def test_fetch_data_http_error(self, ingester):
        mock_response = MagicMock(status_code=503, text="Service Unavailable")

        with patch(
            "shooting_report.datasets.shootings.ingest.requests.get",
            return_value=mock_response,
        ):
            with pytest.raises(RuntimeError, match="HTTP 503"):
                ingester.fetch_data()

    def test_fetch_data_from_local_path(self, ingester, sample_raw_data, tmp_path):
        path = tmp_path / "shootings.csv"
        sample_raw_data.to_csv(path, index=False)

        with patch("shooting_report.datasets.shootings.ingest.requests.get") as mock_get:
            df = ingester.fetch_data(path=path)

        mock_get.assert_not_called()
        assert len(df) == 6

    def test_run_success(self, ingester, mock_open_data_api):
        result = ingester.run(execution_date="2024-01-15")

        assert result.success
        assert result.rows_fetched == 6
        assert ingester.get_data() is not None

    def test_run_schema_mismatch_fails_fast(self, ingester):
        mock_response = MagicMock(status_code=200, text="OCCUR_DATE,BORO\n01/15/2019,BROOKLYN\n")

        with patch(
            "shooting_report.datasets.shootings.ingest.requests.get",
            return_value=mock_response,
        ):
            result = ingester.run(execution_date="2024-01-15")

        assert not result.success
        assert "OCCUR_TIME" in result.error_message
        assert result.missing_columns == ["OCCUR_TIME", "VIC_RACE"]
        assert ingester.get_data() is None

    def test_run_request_exception(self, ingester):
        with patch(
            "shooting_report.datasets.shootings.ingest.requests.get",
            side_effect=ConnectionError("unreachable"),
        ):
            result = ingester.run(execution_date="2024-01-15")

        assert not result.success
        assert "unreachable" in result.error_message

    def test_result_to_dict(self, ingester, mock_open_data_api):
        result = ingester.run(execution_date="2024-01-15")
        d = result.to_dict()

        assert d["dataset"] == "shootings"
        assert d["rows_fetched"] == 6
        assert d["success"] is True


class TestConvenienceFunctions:
    """Test convenience functions."""

    def test_ingest_shooting_data(self, mock_open_data_api):
        df = ingest_shooting_data(execution_date="2024-01-15")

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 6

    def test_ingest_shooting_data_raises(self):
        with patch(
            "shooting_report.datasets.shootings.ingest.requests.get",
            side_effect=ConnectionError("unreachable"),
        ):
            with pytest.raises(ReportError):
                ingest_shooting_data(execution_date="2024-01-15")
