"""
NYC Shooting Report - Report Renderer

Writes the report artifacts for a run:
- borough_lookup.csv / borough_lookup.html: the code-to-name lookup table
- <table>.csv for every aggregate table
- race_by_borough.png, time_of_day_by_borough.png: grouped bar charts
- time_of_day_trend_<code>.png: per-borough line chart over years

Usage:
    renderer = ReportRenderer(config)
    result = renderer.render(tables, output_dir="output")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from shooting_report.datasets.shootings.aggregate import (
    RACE_BY_BOROUGH,
    TIME_OF_DAY_BY_BOROUGH,
    TIME_OF_DAY_BY_BOROUGH_YEAR,
)
from shooting_report.datasets.shootings.models import (
    BOROUGH_NAMES,
    TIME_CATEGORY_ORDER,
    borough_lookup_table,
)
from shooting_report.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Result of a rendering operation."""

    output_dir: str
    artifacts: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "output_dir": self.output_dir,
            "artifacts": self.artifacts,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
        }


class ReportRenderer:
    """Render aggregate tables to CSV, HTML and PNG artifacts."""

    def __init__(self, config: Settings | None = None):
        self.config = config or get_config()
        self.report_config = self.config.report

    def render(
        self,
        tables: dict[str, pd.DataFrame],
        output_dir: str | Path | None = None,
    ) -> RenderResult:
        """
        Render every artifact for the given tables.

        Args:
            tables: Aggregate tables keyed by table name
            output_dir: Target directory (defaults to report.output_dir)

        Returns:
            RenderResult listing the written files
        """
        start_time = time.time()
        out = Path(output_dir or self.report_config.output_dir)
        result = RenderResult(output_dir=str(out))

        logger.info(f"Rendering report to {out}", extra={"tables": list(tables)})

        try:
            out.mkdir(parents=True, exist_ok=True)

            result.artifacts.extend(self.write_lookup_table(out))
            for name, table in tables.items():
                path = out / f"{name}.csv"
                table.to_csv(path, index=False)
                result.artifacts.append(str(path))

            if RACE_BY_BOROUGH in tables:
                result.artifacts.append(
                    self.plot_grouped_bars(
                        tables[RACE_BY_BOROUGH],
                        hue="victim_race",
                        title="Shooting Victims by Race within Each Borough (%)",
                        path=out / f"{RACE_BY_BOROUGH}.png",
                    )
                )
            if TIME_OF_DAY_BY_BOROUGH in tables:
                result.artifacts.append(
                    self.plot_grouped_bars(
                        tables[TIME_OF_DAY_BY_BOROUGH],
                        hue="time_category",
                        hue_order=TIME_CATEGORY_ORDER,
                        title="Shootings by Time of Day within Each Borough (%)",
                        path=out / f"{TIME_OF_DAY_BY_BOROUGH}.png",
                    )
                )
            if TIME_OF_DAY_BY_BOROUGH_YEAR in tables:
                result.artifacts.extend(
                    self.plot_borough_trends(tables[TIME_OF_DAY_BY_BOROUGH_YEAR], out)
                )

        except Exception as e:
            logger.error(f"Rendering failed: {e}", extra={"error": str(e)}, exc_info=True)
            result.success = False
            result.error_message = str(e)

        result.duration_seconds = time.time() - start_time
        logger.info(
            f"Rendered {len(result.artifacts)} artifacts to {out}",
            extra=result.to_dict(),
        )
        return result

    def write_lookup_table(self, out: Path) -> list[str]:
        """Write the borough lookup table as CSV and as a styled HTML table."""
        lookup = borough_lookup_table()

        csv_path = out / "borough_lookup.csv"
        lookup.to_csv(csv_path, index=False)

        html_path = out / "borough_lookup.html"
        html = lookup.rename(columns={"code": "Code", "borough": "Borough"}).to_html(
            index=False, classes="borough-lookup", border=0, justify="left"
        )
        html_path.write_text(_LOOKUP_STYLE + html)

        return [str(csv_path), str(html_path)]

    def plot_grouped_bars(
        self,
        table: pd.DataFrame,
        hue: str,
        title: str,
        path: Path,
        hue_order: list[str] | None = None,
    ) -> str:
        """Bar chart of proportions per borough, one bar per ``hue`` value."""
        fig, ax = plt.subplots(
            figsize=(self.report_config.figure_width, self.report_config.figure_height)
        )
        try:
            if len(table) > 0:
                sns.barplot(
                    data=table,
                    x="borough_name",
                    y="proportion",
                    hue=hue,
                    hue_order=hue_order,
                    order=[n for n in BOROUGH_NAMES.values() if n in set(table["borough_name"])],
                    palette=self.report_config.palette,
                    ax=ax,
                )
                ax.legend(
                    title=hue.replace("_", " ").title(),
                    bbox_to_anchor=(1.01, 1),
                    loc="upper left",
                )
            ax.set_title(title, fontsize=14, fontweight="bold")
            ax.set_xlabel("Borough")
            ax.set_ylabel("Proportion (%)")
            fig.tight_layout()
            fig.savefig(path, dpi=self.report_config.dpi)
        finally:
            plt.close(fig)

        logger.info(f"Saved {path.name}")
        return str(path)

    def plot_borough_trends(self, table: pd.DataFrame, out: Path) -> list[str]:
        """One line chart per borough: time-of-day proportions by year."""
        paths = []
        for code, group in table.groupby("borough", sort=True):
            path = out / f"time_of_day_trend_{code}.png"
            fig, ax = plt.subplots(
                figsize=(self.report_config.figure_width, self.report_config.figure_height)
            )
            try:
                sns.lineplot(
                    data=group,
                    x="year",
                    y="proportion",
                    hue="time_category",
                    hue_order=TIME_CATEGORY_ORDER,
                    marker="o",
                    palette=self.report_config.palette,
                    ax=ax,
                )
                ax.set_title(
                    f"{BOROUGH_NAMES[code]}: Shootings by Time of Day per Year (%)",
                    fontsize=14,
                    fontweight="bold",
                )
                ax.set_xlabel("Year")
                ax.set_ylabel("Proportion (%)")
                ax.legend(title="Time of Day")
                fig.tight_layout()
                fig.savefig(path, dpi=self.report_config.dpi)
            finally:
                plt.close(fig)
            paths.append(str(path))

        logger.info(f"Saved {len(paths)} borough trend charts")
        return paths


_LOOKUP_STYLE = """<style>
table.borough-lookup { border-collapse: collapse; font-family: sans-serif; }
table.borough-lookup th { background: #34495e; color: #fff; padding: 6px 12px; }
table.borough-lookup td { padding: 6px 12px; border-bottom: 1px solid #ddd; }
</style>
"""
