"""
Shooting Report Script
Downloads NYPD shooting incidents and writes the borough report
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from shooting_report.pipeline import run_report
from shooting_report.shared.config import get_config
from shooting_report.shared.errors import ReportError


def configure_logging(level: str, log_file: str | None) -> None:
    """Set up console logging, plus a log file when configured."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Build the NYC shooting incident report.")
    parser.add_argument(
        "--source",
        default=None,
        help="Local CSV to read instead of downloading from NYC Open Data",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for tables and charts (defaults to report.output_dir)",
    )
    parser.add_argument(
        "--environment",
        choices=["dev", "prod"],
        default=os.getenv("SR_ENVIRONMENT", "dev"),
        help="Configuration environment",
    )
    parser.add_argument("--execution-date", default=None, help="Report date (YYYY-MM-DD)")
    args = parser.parse_args()

    config = get_config(args.environment)
    configure_logging(config.logging.level, config.logging.log_file)
    logger = logging.getLogger("run_report")

    try:
        report = run_report(
            execution_date=args.execution_date,
            source_path=args.source,
            output_dir=args.output_dir,
            config=config,
        )
    except ReportError as e:
        logger.error(f"Report failed: {e}")
        return 1

    print("\n" + "=" * 80)
    print("NYC SHOOTING REPORT")
    print("=" * 80)
    print(f"  Records fetched:  {report.ingestion.rows_fetched}")
    print(f"  Records kept:     {report.preprocessing.rows_output}")
    for reason, count in report.preprocessing.drop_reasons.items():
        print(f"    dropped ({reason}): {count}")
    for name, table in report.tables.items():
        print(f"  {name}: {len(table)} rows")
    if report.rendering:
        print(f"  Artifacts: {report.rendering.output_dir}")
    print("=" * 80 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
