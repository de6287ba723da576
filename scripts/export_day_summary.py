"""
Export Day Summary Script

Writes the end-of-day canvassing CSV for a stored workspace snapshot.

Usage:
    python scripts/export_day_summary.py --date 2024-05-01 [--key default] [--output-dir exports]
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
from datetime import date

from config.settings import settings
from src.canvasser.db import SnapshotRepository, get_db_session
from src.canvasser.reports.day_summary import DaySummaryAggregator
from src.canvasser.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def export_day_summary(day: date, key: str, output_dir: Path, tz: str = None) -> Path:
    """
    Load the snapshot under key and write its summary for day.

    Returns:
        Path of the written CSV

    Raises:
        LookupError: No snapshot stored under key
    """
    with get_db_session() as session:
        snapshot = SnapshotRepository().load(session, key)
    if snapshot is None:
        raise LookupError(f"No canvassing snapshot stored under key '{key}'")

    aggregator = DaySummaryAggregator(tz=tz)
    summary = aggregator.summarize(day, snapshot.properties)
    return aggregator.write_csv(summary, output_dir)


def main():
    """Main entry point for the export script."""
    parser = argparse.ArgumentParser(
        description="Export the canvassing day summary as CSV"
    )
    parser.add_argument(
        '--date',
        type=date.fromisoformat,
        default=date.today(),
        help='Report date as YYYY-MM-DD (default: today)'
    )
    parser.add_argument(
        '--key',
        default=settings.snapshot_key,
        help=f'Snapshot key (default: {settings.snapshot_key})'
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=Path('.'),
        help='Directory to write the CSV into (default: current directory)'
    )
    parser.add_argument(
        '--timezone',
        default=None,
        help=f'IANA timezone defining the day (default: {settings.report_timezone})'
    )

    args = parser.parse_args()
    setup_logging()

    try:
        path = export_day_summary(args.date, args.key, args.output_dir, args.timezone)
        print(f"\n✓ Summary written to {path}\n")

    except LookupError as e:
        print(f"\n✗ {e}\n")
        logger.error("day_summary_export_failed", key=args.key, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
