"""
Unit tests for ShootingAggregator and compute_proportions.

The normalization scope is the part worth checking: proportions are computed
within each borough (and borough-year), never across all boroughs.
"""

import pandas as pd
import pytest

from shooting_report.datasets.base import compute_proportions
from shooting_report.datasets.shootings.aggregate import (
    RACE_BY_BOROUGH,
    TIME_OF_DAY_BY_BOROUGH,
    TIME_OF_DAY_BY_BOROUGH_YEAR,
    ShootingAggregator,
    aggregate_shooting_data,
)
from shooting_report.datasets.shootings.categorize import add_time_category


class TestComputeProportions:
    """Test cases for compute_proportions."""

    def test_two_to_one_split(self):
        """BK with races {A, A, B}."""
        df = pd.DataFrame({"borough": ["BK", "BK", "BK"], "victim_race": ["A", "A", "B"]})

        table = compute_proportions(df, ["borough"], "victim_race")

        assert table["victim_race"].tolist() == ["A", "B"]
        assert table["count"].tolist() == [2, 1]
        assert table["proportion"].iloc[0] == pytest.approx(66.667, abs=1e-3)
        assert table["proportion"].iloc[1] == pytest.approx(33.333, abs=1e-3)

    def test_normalized_per_scope_not_globally(self):
        """A small borough still sums to 100 on its own."""
        df = pd.DataFrame(
            {
                "borough": ["BK"] * 8 + ["SI"] * 2,
                "victim_race": ["A"] * 6 + ["B"] * 2 + ["A", "B"],
            }
        )

        table = compute_proportions(df, ["borough"], "victim_race")
        si = table[table["borough"] == "SI"]

        assert si["proportion"].tolist() == pytest.approx([50.0, 50.0])
        # Global normalization would have given 10% each
        assert (si["proportion"] != 10.0).all()

    def test_two_level_scope(self):
        df = pd.DataFrame(
            {
                "borough": ["BK", "BK", "BK", "BK"],
                "year": [2020, 2020, 2021, 2021],
                "time_category": ["Morning", "Evening", "Morning", "Morning"],
            }
        )

        table = compute_proportions(df, ["borough", "year"], "time_category")
        by_year = table.set_index(["year", "time_category"])["proportion"]

        assert by_year[(2020, "Morning")] == pytest.approx(50.0)
        assert by_year[(2020, "Evening")] == pytest.approx(50.0)
        assert by_year[(2021, "Morning")] == pytest.approx(100.0)

    def test_empty_input(self):
        df = pd.DataFrame({"borough": [], "victim_race": []})

        table = compute_proportions(df, ["borough"], "victim_race")

        assert len(table) == 0
        assert list(table.columns) == ["borough", "victim_race", "count", "proportion"]

    def test_unobserved_categories_produce_no_rows(self):
        """An empty scope is skipped, never a NaN row."""
        df = add_time_category(pd.DataFrame({"borough": ["BK", "BK"], "hour": [6, 7]}))

        table = compute_proportions(df, ["borough"], "time_category")

        assert len(table) == 1
        assert table["proportion"].notna().all()
        assert table["proportion"].iloc[0] == pytest.approx(100.0)


class TestShootingAggregator:
    """Test cases for ShootingAggregator class."""

    @pytest.fixture
    def aggregator(self):
        """Create a ShootingAggregator instance."""
        return ShootingAggregator()

    def test_get_dataset_name(self, aggregator):
        assert aggregator.get_dataset_name() == "shootings"

    def test_table_definitions(self, aggregator):
        names = [d.name for d in aggregator.get_table_definitions()]
        assert names == [RACE_BY_BOROUGH, TIME_OF_DAY_BY_BOROUGH, TIME_OF_DAY_BY_BOROUGH_YEAR]

    def test_run_success(self, aggregator, sample_categorized_data):
        result = aggregator.run(sample_categorized_data, execution_date="2024-01-15")

        assert result.success
        assert result.tables_built == 3
        assert result.rows_input == 9

    def test_race_proportions_sum_to_100_per_borough(self, aggregator, sample_categorized_data):
        aggregator.run(sample_categorized_data, execution_date="2024-01-15")
        table = aggregator.get_data()[RACE_BY_BOROUGH]

        sums = table.groupby("borough")["proportion"].sum()
        assert sums.tolist() == pytest.approx([100.0] * len(sums), abs=1e-6)
        assert set(sums.index) == {"BK", "BX"}

    def test_time_proportions_sum_to_100_per_borough_year(
        self, aggregator, sample_categorized_data
    ):
        aggregator.run(sample_categorized_data, execution_date="2024-01-15")
        table = aggregator.get_data()[TIME_OF_DAY_BY_BOROUGH_YEAR]

        sums = table.groupby(["borough", "year"])["proportion"].sum()
        assert len(sums) == 4
        assert sums.tolist() == pytest.approx([100.0] * 4, abs=1e-6)

    def test_race_counts(self, aggregator, sample_categorized_data):
        aggregator.run(sample_categorized_data, execution_date="2024-01-15")
        table = aggregator.get_data()[RACE_BY_BOROUGH]

        bk_black = table[(table["borough"] == "BK") & (table["victim_race"] == "BLACK")]
        assert bk_black["count"].iloc[0] == 3
        assert bk_black["proportion"].iloc[0] == pytest.approx(60.0)

    def test_borough_names_attached(self, aggregator, sample_categorized_data):
        aggregator.run(sample_categorized_data, execution_date="2024-01-15")
        table = aggregator.get_data()[TIME_OF_DAY_BY_BOROUGH]

        names = dict(zip(table["borough"], table["borough_name"], strict=True))
        assert names == {"BK": "Brooklyn", "BX": "Bronx"}

    def test_time_categories_in_display_order(self, aggregator, sample_categorized_data):
        aggregator.run(sample_categorized_data, execution_date="2024-01-15")
        table = aggregator.get_data()[TIME_OF_DAY_BY_BOROUGH]

        bx = table[table["borough"] == "BX"]["time_category"].astype(str).tolist()
        assert bx == ["Morning", "Afternoon", "Evening", "Late Night"]

    def test_trend_table_excludes_dates_after_cutoff(self, aggregator, sample_categorized_data):
        """A 2024-06-01 record is excluded from the year trend only."""
        late = sample_categorized_data.iloc[[0]].copy()
        late["occurred_date"] = pd.Timestamp("2024-06-01")
        late["year"] = 2024
        df = pd.concat([sample_categorized_data, late], ignore_index=True)

        aggregator.run(df, execution_date="2024-01-15")
        tables = aggregator.get_data()

        assert 2024 not in set(tables[TIME_OF_DAY_BY_BOROUGH_YEAR]["year"])
        assert tables[RACE_BY_BOROUGH]["count"].sum() == 10
        assert tables[TIME_OF_DAY_BY_BOROUGH]["count"].sum() == 10
        assert tables[TIME_OF_DAY_BY_BOROUGH_YEAR]["count"].sum() == 9

    def test_unknown_borough_fails_loudly(self, aggregator, sample_categorized_data):
        df = sample_categorized_data.copy()
        df.loc[0, "borough"] = "ZZ"

        result = aggregator.run(df, execution_date="2024-01-15")

        assert not result.success
        assert "ZZ" in result.error_message

    def test_empty_input(self, aggregator, sample_categorized_data):
        empty = sample_categorized_data.iloc[0:0]

        result = aggregator.run(empty, execution_date="2024-01-15")

        assert result.success
        assert all(rows == 0 for rows in result.table_rows.values())

    def test_table_stats(self, aggregator, sample_categorized_data):
        result = aggregator.run(sample_categorized_data, execution_date="2024-01-15")

        assert result.table_stats[RACE_BY_BOROUGH]["total_count"] == 9


class TestConvenienceFunctions:
    """Test convenience functions."""

    def test_aggregate_shooting_data(self, sample_categorized_data):
        tables = aggregate_shooting_data(sample_categorized_data, execution_date="2024-01-15")

        assert set(tables) == {
            RACE_BY_BOROUGH,
            TIME_OF_DAY_BY_BOROUGH,
            TIME_OF_DAY_BY_BOROUGH_YEAR,
        }
