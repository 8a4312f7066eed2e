"""
Database Operations for the Bronze Stage

The bronze table is a full snapshot: every load truncates it and inserts the
new CSV content in a single transaction.
"""

import logging

from podcast_etl.common.database import DatabaseError, PostgresDB
from podcast_etl.common.records import RAW_COLUMNS, RawRecord

logger = logging.getLogger(__name__)

BRONZE_SCHEMA = 'bronze'
TABLE_NAME = 'spotify_top_podcasts'

__all__ = ['BronzeDB', 'DatabaseError']


class BronzeDB(PostgresDB):
    """Database interface for the bronze stage."""

    def replace_raw_records(self, records: list[RawRecord]) -> int:
        """
        Replace the bronze table with `records`.

        Returns:
            Number of rows written

        Raises:
            DatabaseError: If the write fails (bronze keeps its prior content)
        """
        rows = [
            tuple(getattr(record, column) for column in RAW_COLUMNS)
            for record in records
        ]
        return self._replace_table(BRONZE_SCHEMA, TABLE_NAME, RAW_COLUMNS, rows)
