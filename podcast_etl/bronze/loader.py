"""
Bronze CSV Reader

Reads the daily "Top Podcasts" CSV export into RawRecord objects without
interpreting any value. The export has a header row followed by 18
positional columns in the order of RAW_COLUMNS.

Bulk-load semantics:
- Columns are matched by position, not by header name
- An empty field is stored as None
- A row with the wrong number of columns aborts the whole load
"""

import csv
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Union

from podcast_etl.common.records import RAW_COLUMNS, RawRecord

logger = logging.getLogger(__name__)


class BronzeLoadError(Exception):
    """Raised when the CSV export cannot be read into bronze rows."""

    pass


def iter_bronze_csv(path: Union[str, Path]) -> Iterator[RawRecord]:
    """
    Yield one RawRecord per data row of the CSV file.

    Args:
        path: Path to the CSV export (UTF-8, optional BOM)

    Yields:
        RawRecord with every field as text or None

    Raises:
        BronzeLoadError: If the file is missing or a row has the wrong
                         number of columns
    """
    path = Path(path)
    if not path.exists():
        raise BronzeLoadError(f"CSV file not found: {path}")

    expected = len(RAW_COLUMNS)

    with path.open('r', encoding='utf-8-sig', newline='') as handle:
        reader = csv.reader(handle)

        # Header row is skipped, columns are positional
        header = next(reader, None)
        if header is None:
            logger.warning("CSV file is empty", extra={'path': str(path)})
            return

        for row in reader:
            if not row:
                continue
            if len(row) != expected:
                raise BronzeLoadError(
                    f"{path}:{reader.line_num}: expected {expected} columns, got {len(row)}"
                )
            yield RawRecord(*(value if value != '' else None for value in row))


def read_bronze_csv(path: Union[str, Path]) -> list[RawRecord]:
    """
    Read the whole CSV export into memory.

    The file is parsed completely before anything is written, so a malformed
    row never leaves the bronze table half-loaded.
    """
    try:
        records = list(iter_bronze_csv(path))
    except csv.Error as e:
        raise BronzeLoadError(f"Malformed CSV in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise BronzeLoadError(f"{path} is not valid UTF-8: {e}") from e

    logger.info(
        "Read bronze CSV",
        extra={'path': str(path), 'rows': len(records)}
    )
    return records
