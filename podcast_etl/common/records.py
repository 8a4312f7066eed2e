"""
Record Types for the Podcast Chart Pipeline

RawRecord mirrors one row of the bronze table (every column is untyped text).
CleanRecord mirrors one row of the silver table after cleaning.

The column tuples below fix the order used for CSV parsing and for the
INSERT statements, so the loaders and the database layer stay in sync.
"""

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class RawRecord:
    """One chart entry (episode x region x day) exactly as ingested."""

    episode_date: Optional[str] = None
    rank: Optional[str] = None
    region_code: Optional[str] = None
    chart_move: Optional[str] = None
    episode_id: Optional[str] = None
    show_id: Optional[str] = None
    episode_title: Optional[str] = None
    episode_description: Optional[str] = None
    show_title: Optional[str] = None
    show_description: Optional[str] = None
    publisher: Optional[str] = None
    duration_ms_text: Optional[str] = None
    explicit_flag_text: Optional[str] = None
    languages_text: Optional[str] = None
    release_date_text: Optional[str] = None
    release_date_precision_text: Optional[str] = None
    media_type_text: Optional[str] = None
    total_episodes_text: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "RawRecord":
        """Build a RawRecord from a database row, ignoring unknown keys."""
        return cls(**{name: row.get(name) for name in RAW_COLUMNS})

    def to_row(self) -> dict[str, Optional[str]]:
        return asdict(self)


@dataclass(frozen=True)
class CleanRecord:
    """One typed, validated chart entry ready for the silver table."""

    episode_date: Optional[date]
    rank: Optional[int]
    region: str
    chart_move: Optional[str]
    episode_id: Optional[str]
    canonical_show_id: Optional[str]
    episode_title: str
    episode_description: str
    show_title: str
    show_description: str
    publisher: str
    duration_ms: Optional[int]
    explicit_flag: str
    language_family: str
    release_date: Optional[date]
    release_date_precision: str
    media_type: str
    total_episodes: Optional[int]
    loaded_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CleanRecord":
        return cls(**{name: row.get(name) for name in CLEAN_COLUMNS + ('loaded_at',)})

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


RAW_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(RawRecord))

# loaded_at is stamped by the writer, not by the normalizer
CLEAN_COLUMNS: tuple[str, ...] = tuple(
    f.name for f in fields(CleanRecord) if f.name != 'loaded_at'
)
