"""
Podcast Chart Record Normalization

This module transforms raw bronze rows (untyped text) into typed silver
records. Every rule degrades bad input to a sentinel instead of failing:

Key Responsibilities:
- Decode region codes and language literals through the lookup tables
- Replace placeholder and corrupted text with "Unknown"
- Fix known-bad show names from the manual override table
- Coerce integer and date columns, leaving None when coercion fails

Each field is cleaned independently. The only cross-field dependency is
show_title, which consults the canonical show id chosen by the identity
resolver.
"""

import logging
import re
from collections.abc import Sequence
from typing import Any, Optional

from podcast_etl.common.coercion import (
    clean_text,
    parse_date,
    parse_int,
    parse_int_dropping_decimal_zero,
    parse_release_date,
)
from podcast_etl.common.records import CleanRecord, RawRecord

from .identity import ShowIdentityResolver
from .lookups import SilverLookups

logger = logging.getLogger(__name__)


UNKNOWN = 'Unknown'
OTHER = 'Other'

# Literal placeholders the export uses for "no value" (case-sensitive)
PLACEHOLDER_VALUES = {'', 'N/A', 'null'}

# Show titles corrupted by a failed text encoding: "??" anywhere, or a leading "?".
# A single "?" inside a title is legitimate ("Who Did It?").
_CORRUPT_SHOW_TITLE = re.compile(r'\?\?|^\?')


def normalize_record(
    raw: RawRecord,
    canonical_show_id: Optional[str],
    lookups: SilverLookups,
) -> CleanRecord:
    """
    Normalize one raw chart row into a CleanRecord.

    Args:
        raw: Row from the bronze table
        canonical_show_id: Show id chosen by ShowIdentityResolver for this row
        lookups: Static region/language/override tables

    Returns:
        CleanRecord with every field cleaned. loaded_at is left unset; the
        writer stamps it.

    Examples:
        >>> lookups = load_silver_lookups()
        >>> raw = RawRecord(region_code='JP', duration_ms_text='123456.0')
        >>> clean = normalize_record(raw, None, lookups)
        >>> clean.region, clean.duration_ms
        ('Japan', 123456)
    """
    return CleanRecord(
        episode_date=parse_date(raw.episode_date),
        rank=parse_int(raw.rank),
        region=normalize_region(raw.region_code, lookups),
        chart_move=clean_text(raw.chart_move),
        episode_id=raw.episode_id,
        canonical_show_id=canonical_show_id,
        episode_title=clean_narrative(raw.episode_title),
        episode_description=clean_narrative(raw.episode_description),
        show_title=clean_show_title(raw.show_title, canonical_show_id, lookups),
        show_description=clean_narrative(raw.show_description),
        publisher=clean_publisher(raw.publisher),
        duration_ms=parse_int_dropping_decimal_zero(raw.duration_ms_text),
        explicit_flag=clean_label(raw.explicit_flag_text),
        language_family=normalize_language(raw.languages_text, lookups),
        release_date=parse_release_date(raw.release_date_text),
        release_date_precision=clean_label(raw.release_date_precision_text),
        media_type=clean_label(raw.media_type_text),
        total_episodes=parse_int_dropping_decimal_zero(raw.total_episodes_text),
    )


def normalize_records(
    records: Sequence[RawRecord],
    lookups: SilverLookups,
    resolver: Optional[ShowIdentityResolver] = None,
) -> list[CleanRecord]:
    """
    Normalize a whole run of raw rows, one CleanRecord per input row.

    The identity resolver is built from the complete input before any row is
    normalized. Pass a prebuilt resolver to reuse its group statistics.
    """
    if resolver is None:
        resolver = ShowIdentityResolver.from_records(records)

    return [
        normalize_record(record, resolver.canonical_show_id(record), lookups)
        for record in records
    ]


def normalize_region(value: Any, lookups: SilverLookups) -> str:
    """
    Decode a two-letter chart region code into its name.

    Matching is on the lower-cased code without trimming; anything not in the
    table becomes "Unknown".
    """
    if value is None:
        return UNKNOWN

    region = lookups.regions.get(str(value).lower())
    if region is None:
        logger.debug("Unrecognized region code", extra={'value': value})
        return UNKNOWN
    return region


def normalize_language(value: Any, lookups: SilverLookups) -> str:
    """
    Map a serialized language list (e.g. "['en-US']") to a language family.

    The undetermined marker and missing values map to "Unknown"; any other
    unrecognized literal maps to "Other".
    """
    if value is None:
        return UNKNOWN

    literal = str(value)
    if literal in lookups.undetermined_languages:
        return UNKNOWN

    family = lookups.language_literals.get(literal)
    if family is None:
        logger.debug("Unrecognized language literal", extra={'value': literal})
        return OTHER
    return family


def clean_narrative(value: Any) -> str:
    """
    Clean a free-text field (titles and descriptions).

    Trimmed text that is empty, a placeholder ("N/A", "null") or starts with
    "?" (an encoding corruption marker) becomes "Unknown".
    """
    text = clean_text(value)
    if text is None or text in PLACEHOLDER_VALUES or text.startswith('?'):
        return UNKNOWN
    return text


def clean_show_title(
    value: Any,
    canonical_show_id: Optional[str],
    lookups: SilverLookups,
) -> str:
    """
    Clean a show title. Order matters, first match wins:

    1. Manual override for the canonical show id (used verbatim)
    2. Corrupted raw title ("??" anywhere or a leading "?") -> "Unknown"
    3. Placeholder handling shared with the other narrative fields
    """
    if canonical_show_id is not None:
        override = lookups.show_overrides.get(canonical_show_id.strip().lower())
        if override is not None:
            return override

    if value is not None and _CORRUPT_SHOW_TITLE.search(str(value)):
        return UNKNOWN

    return clean_narrative(value)


def clean_label(value: Any) -> str:
    """Trim a short label column; missing or blank values become "Unknown"."""
    text = clean_text(value)
    if not text:
        return UNKNOWN
    return text


def clean_publisher(value: Any) -> str:
    """
    Trim a publisher name; missing, blank or placeholder values become "Unknown".

    Unlike the narrative fields, a leading "?" is kept: publisher names are not
    affected by the title encoding corruption.
    """
    text = clean_text(value)
    if not text or text in PLACEHOLDER_VALUES:
        return UNKNOWN
    return text
