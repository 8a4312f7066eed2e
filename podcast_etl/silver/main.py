"""
Silver Load - Main Entry Point

This is the command-line interface for the silver stage. It reads the bronze
table, resolves show identities, cleans every row and replaces the silver
table. It can be called directly from the terminal or from Airflow tasks.

Usage:
    python -m podcast_etl.silver.main [OPTIONS]

Options:
    --lookups TEXT       Path to a lookups YAML file (default: bundled lookups.yml)
    --dry-run            Clean the rows but do not write to the database
    --verbose            Enable debug logging
    --help               Show this message and exit

Examples:
    # Rebuild the silver table:
    python -m podcast_etl.silver.main

    # See what a run would produce without writing:
    python -m podcast_etl.silver.main --dry-run --verbose

Exit Codes:
    0: Success
    2: Fatal error (database connection, missing bronze table, bad lookups, etc.)
"""

import argparse
import logging
import os
import sys
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from dotenv import load_dotenv

from .db_operations import DatabaseError, SilverDB
from .identity import ShowIdentityResolver
from .lookups import SilverLookups, load_silver_lookups
from .normalize import UNKNOWN, normalize_records

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, dict[str, Any]], None]


def log_event(event: str, payload: dict[str, Any]) -> None:
    """Default stage-event sink: one structured INFO log line per event."""
    logger.info(event, extra=payload)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Clean bronze podcast chart rows into the silver table',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--lookups',
        type=str,
        default=None,
        help='Path to a lookups YAML file (default: bundled lookups.yml)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Clean the rows but do not write to the database',
        dest='dry_run'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def run_silver_load(
    db: SilverDB,
    lookups: SilverLookups,
    dry_run: bool = False,
    on_event: Optional[EventCallback] = None,
) -> dict[str, int]:
    """
    Main silver load logic.

    Args:
        db: Database interface
        lookups: Static lookup tables
        dry_run: If True, don't write to database
        on_event: Receives (event_name, payload) at each stage boundary.
                  Defaults to structured logging.

    Returns:
        Dictionary with statistics:
        - fetched: Number of bronze rows read
        - cleaned: Number of silver records produced (always == fetched)
        - written: Number of rows written to silver (0 on dry run)
        - identity_groups: Number of (show_title, publisher) groups
        - drifted_groups: Groups that carried more than one raw show id
        - overridden_titles: Rows whose show title came from the override table
        - unknown_regions: Rows whose region code was not recognized

    Raises:
        DatabaseError: If reading bronze or writing silver fails. Nothing is
                       partially written.
    """
    emit = on_event or log_event
    started = time.monotonic()

    stats = {
        'fetched': 0,
        'cleaned': 0,
        'written': 0,
        'identity_groups': 0,
        'drifted_groups': 0,
        'overridden_titles': 0,
        'unknown_regions': 0,
    }

    emit('silver_load_started', {'dry_run': dry_run})

    raw_records = db.fetch_bronze_records()
    stats['fetched'] = len(raw_records)

    if not raw_records:
        logger.warning("Bronze table is empty, silver will be emptied as well")

    # Identity resolution needs every row before any row can be cleaned
    resolver = ShowIdentityResolver.from_records(raw_records)
    stats['identity_groups'] = len(resolver.groups)
    stats['drifted_groups'] = resolver.drifted_group_count
    emit('identities_resolved', {
        'groups': stats['identity_groups'],
        'drifted_groups': stats['drifted_groups'],
        'elapsed_ms': _elapsed_ms(started),
    })

    clean_records = normalize_records(raw_records, lookups, resolver=resolver)
    stats['cleaned'] = len(clean_records)
    stats['overridden_titles'] = sum(
        1 for record in clean_records
        if record.canonical_show_id is not None
        and record.canonical_show_id.strip().lower() in lookups.show_overrides
    )
    stats['unknown_regions'] = sum(1 for record in clean_records if record.region == UNKNOWN)
    emit('records_normalized', {
        'rows': stats['cleaned'],
        'overridden_titles': stats['overridden_titles'],
        'unknown_regions': stats['unknown_regions'],
        'elapsed_ms': _elapsed_ms(started),
    })

    if dry_run:
        logger.info(f"DRY RUN: Would replace silver with {len(clean_records)} rows")
    else:
        stats['written'] = db.replace_silver_records(
            clean_records, loaded_at=datetime.now(timezone.utc)
        )
        emit('silver_written', {'rows': stats['written'], 'elapsed_ms': _elapsed_ms(started)})

    emit('silver_load_completed', {**stats, 'elapsed_ms': _elapsed_ms(started)})

    return stats


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the silver stage.

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
        logger.debug("Debug logging enabled")

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        logger.error("DATABASE_URL environment variable must be set")
        return 2

    try:
        lookups = load_silver_lookups(args.lookups)

        logger.info("Connecting to database")
        db = SilverDB(database_url)

        stats = run_silver_load(db=db, lookups=lookups, dry_run=args.dry_run)

        logger.info(
            "Silver load completed successfully",
            extra={'fetched': stats['fetched'], 'written': stats['written']}
        )
        return 0

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid lookup configuration: {e}")
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
