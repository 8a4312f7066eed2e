"""
Bronze Load - Main Entry Point

Loads the daily Top Podcasts CSV export into bronze.spotify_top_podcasts,
replacing the previous snapshot.

Usage:
    python -m podcast_etl.bronze.main CSV_PATH [OPTIONS]

Options:
    --dry-run            Parse the file but do not write to the database
    --verbose            Enable debug logging

Exit Codes:
    0: Success
    2: Fatal error (unreadable CSV, database connection, etc.)
"""

import argparse
import logging
import os
import sys
import time
from collections.abc import Callable
from typing import Any, Optional

from dotenv import load_dotenv

from .db_operations import BronzeDB, DatabaseError
from .loader import BronzeLoadError, read_bronze_csv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def log_event(event: str, payload: dict[str, Any]) -> None:
    """Default stage-event sink: one structured INFO log line per event."""
    logger.info(event, extra=payload)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Load the Top Podcasts CSV export into the bronze table',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'csv_path',
        type=str,
        help='Path to the CSV export'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Parse the file but do not write to the database',
        dest='dry_run'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def run_bronze_load(
    db: Optional[BronzeDB],
    csv_path: str,
    dry_run: bool = False,
    on_event: Optional[Callable[[str, dict[str, Any]], None]] = None,
) -> dict[str, int]:
    """
    Read the CSV export and replace the bronze table with it.

    Args:
        db: Database interface (may be None on dry run)
        csv_path: Path to the CSV export
        dry_run: If True, don't write to database
        on_event: Receives (event_name, payload) at stage boundaries

    Returns:
        Dictionary with statistics:
        - read: Rows parsed from the CSV
        - written: Rows written to bronze (0 on dry run)

    Raises:
        BronzeLoadError: If the file cannot be parsed (nothing is written)
        DatabaseError: If the write fails (bronze keeps its prior content)
    """
    emit = on_event or log_event
    started = time.monotonic()
    stats = {'read': 0, 'written': 0}

    emit('bronze_load_started', {'csv_path': str(csv_path), 'dry_run': dry_run})

    records = read_bronze_csv(csv_path)
    stats['read'] = len(records)
    emit('csv_read', {'rows': stats['read'], 'elapsed_ms': _elapsed_ms(started)})

    if dry_run or db is None:
        logger.info(f"DRY RUN: Would replace bronze with {len(records)} rows")
    else:
        stats['written'] = db.replace_raw_records(records)
        emit('bronze_written', {'rows': stats['written'], 'elapsed_ms': _elapsed_ms(started)})

    emit('bronze_load_completed', {**stats, 'elapsed_ms': _elapsed_ms(started)})

    return stats


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the bronze stage.

    Returns:
        Exit code (0 = success, 2 = fatal error)
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

    db = None
    if not args.dry_run:
        database_url = os.getenv('DATABASE_URL')
        if not database_url:
            logger.error("DATABASE_URL environment variable must be set")
            return 2

    try:
        if not args.dry_run:
            db = BronzeDB(database_url)

        run_bronze_load(db=db, csv_path=args.csv_path, dry_run=args.dry_run)
        return 0

    except BronzeLoadError as e:
        logger.error(f"Could not read CSV export: {e}")
        return 2

    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2


if __name__ == '__main__':
    sys.exit(main())
