"""
Create Database Tables Using SQLAlchemy

Creates the snapshot store table with SQLAlchemy's create_all().

Usage:
    python scripts/create_database_tables.py [--reset]
"""
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse

import sqlalchemy as sa

from src.canvasser.db.session import create_all_tables, drop_all_tables, engine
from src.canvasser.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main():
    """Create all database tables."""
    parser = argparse.ArgumentParser(description="Create the canvassing snapshot tables")
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Drop existing tables first (deletes all stored snapshots)'
    )
    args = parser.parse_args()
    setup_logging()

    if args.reset:
        drop_all_tables()

    create_all_tables()

    tables = sa.inspect(engine).get_table_names()
    logger.info("database_tables_verified", tables=tables)
    print(f"\n✓ Tables: {', '.join(tables)}\n")


if __name__ == "__main__":
    main()
