"""
Database Operations for the Silver Stage

This module handles all database interactions for the silver load:
- Reading raw chart rows from bronze.spotify_top_podcasts
- Replacing silver.spotify_top_podcasts with the cleaned rows
- Reading the silver table back for data-quality checks

Key Features:
- Full refresh: every run replaces the whole silver table
- All-or-nothing: the replacement runs in one transaction; on failure the
  previous silver content stays in place
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import psycopg2
import psycopg2.extras

from podcast_etl.common.database import DatabaseError, PostgresDB
from podcast_etl.common.records import CLEAN_COLUMNS, RAW_COLUMNS, CleanRecord, RawRecord

logger = logging.getLogger(__name__)

BRONZE_SCHEMA = 'bronze'
SILVER_SCHEMA = 'silver'
TABLE_NAME = 'spotify_top_podcasts'

__all__ = ['DatabaseError', 'SilverDB']


class SilverDB(PostgresDB):
    """
    Database interface for the silver stage.

    This class provides methods to:
    - Fetch every bronze row for the current run
    - Atomically replace the silver table
    - Fetch silver rows and summary statistics
    """

    def fetch_bronze_records(self) -> list[RawRecord]:
        """
        Fetch all raw rows from the bronze table.

        Returns:
            List of RawRecord, one per bronze row

        Raises:
            DatabaseError: If the table is missing or the query fails
        """
        rows = self._fetch_all(BRONZE_SCHEMA, TABLE_NAME, RAW_COLUMNS)
        logger.info("Fetched bronze rows", extra={'count': len(rows)})
        return [RawRecord.from_row(row) for row in rows]

    def replace_silver_records(
        self,
        records: list[CleanRecord],
        loaded_at: Optional[datetime] = None,
    ) -> int:
        """
        Replace the silver table with `records`.

        Every row gets the same loaded_at stamp (defaults to now, UTC).

        Returns:
            Number of rows written

        Raises:
            DatabaseError: If the write fails (silver keeps its prior content)
        """
        loaded_at = loaded_at or datetime.now(timezone.utc)
        columns = CLEAN_COLUMNS + ('loaded_at',)
        rows = [
            tuple(getattr(record, column) for column in CLEAN_COLUMNS) + (loaded_at,)
            for record in records
        ]
        return self._replace_table(SILVER_SCHEMA, TABLE_NAME, columns, rows)

    def fetch_silver_records(self) -> list[CleanRecord]:
        """
        Fetch all cleaned rows from the silver table.

        Raises:
            DatabaseError: If the query fails
        """
        rows = self._fetch_all(SILVER_SCHEMA, TABLE_NAME, CLEAN_COLUMNS + ('loaded_at',))
        logger.info("Fetched silver rows", extra={'count': len(rows)})
        return [CleanRecord.from_row(row) for row in rows]

    def get_silver_stats(self) -> dict[str, Any]:
        """
        Get statistics about the silver table contents.

        Returns:
            Dictionary with:
            - total_rows: Number of chart entries
            - regions: Number of distinct regions
            - chart_days: Number of distinct chart dates
            - shows: Number of distinct canonical show ids
            - loaded_at: Timestamp of the last load

        Example:
            >>> stats = db.get_silver_stats()
            >>> print(f"Total rows: {stats['total_rows']}")
        """
        try:
            with self._get_connection() as conn:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute("""
                        SELECT
                            COUNT(*) AS total_rows,
                            COUNT(DISTINCT region) AS regions,
                            COUNT(DISTINCT episode_date) AS chart_days,
                            COUNT(DISTINCT canonical_show_id) AS shows,
                            MAX(loaded_at) AS loaded_at
                        FROM silver.spotify_top_podcasts
                    """)
                    return dict(cur.fetchone())

        except psycopg2.Error as e:
            logger.error(
                "Failed to get silver stats",
                extra={'error': str(e)}
            )
            raise DatabaseError(f"Failed to get stats: {e}") from e
