"""
Silver Quality Checks - Main Entry Point

Reads silver.spotify_top_podcasts and runs every data-quality check on it.

Usage:
    python -m podcast_etl.quality.main [--lookups PATH] [--verbose]

Exit Codes:
    0: All checks passed
    1: One or more checks failed
    2: Fatal error (database connection, bad lookups, etc.)
"""

import argparse
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from podcast_etl.silver.db_operations import DatabaseError, SilverDB
from podcast_etl.silver.lookups import SilverLookups, load_silver_lookups

from .checks import CheckResult, run_checks

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Run data-quality checks against the silver table',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--lookups',
        type=str,
        default=None,
        help='Path to a lookups YAML file (default: bundled lookups.yml)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def run_quality_checks(db: SilverDB, lookups: SilverLookups) -> list[CheckResult]:
    """
    Fetch the silver table and run every check on it.

    Raises:
        DatabaseError: If the silver table cannot be read
    """
    records = db.fetch_silver_records()
    results = run_checks(records, lookups)

    failed = [result.name for result in results if not result.passed]
    logger.info(
        "Quality checks completed",
        extra={
            'rows': len(records),
            'checks': len(results),
            'failed_checks': failed,
        }
    )
    return results


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the quality checks.

    Returns:
        Exit code (0 = all passed, 1 = some failed, 2 = fatal error)
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        logger.error("DATABASE_URL environment variable must be set")
        return 2

    try:
        lookups = load_silver_lookups(args.lookups)
        db = SilverDB(database_url)
        results = run_quality_checks(db, lookups)

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid lookup configuration: {e}")
        return 2

    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 2

    for result in results:
        status = 'PASS' if result.passed else 'FAIL'
        logger.info(f"[{status}] {result.name}: {result.description} ({result.failures} failures)")

    if any(not result.passed for result in results):
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
