"""
Silver Data-Quality Checks

Each check inspects the full set of silver records and reports how many rows
(or groups) violate one expectation about the table:

- Ranks: within 1..200, unique and complete per (region, date)
- Regions: closed vocabulary, all 22 chart regions present
- chart_move: trimmed, no digits
- Narrative fields: no null/empty/placeholder text leaks through
- Show identity: one canonical show id maps to one show title
- Encoding: no UTF-8-read-as-Latin-1 artefacts ("â€") in episode titles

Checks never raise; they return CheckResult objects the caller can report.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from podcast_etl.common.records import CleanRecord
from podcast_etl.silver.lookups import SilverLookups
from podcast_etl.silver.normalize import PLACEHOLDER_VALUES, UNKNOWN

logger = logging.getLogger(__name__)

MAX_RANK = 200
EXPECTED_REGION_COUNT = 22
MAX_SAMPLES = 5

NARRATIVE_FIELDS = (
    'episode_title',
    'episode_description',
    'show_title',
    'show_description',
    'publisher',
)

_DIGIT = re.compile(r'\d')


@dataclass
class CheckResult:
    """Outcome of one data-quality check."""

    name: str
    passed: bool
    failures: int = 0
    samples: list[Any] = field(default_factory=list)
    description: str = ''


def _result(name: str, description: str, offenders: Sequence[Any]) -> CheckResult:
    return CheckResult(
        name=name,
        passed=not offenders,
        failures=len(offenders),
        samples=list(offenders[:MAX_SAMPLES]),
        description=description,
    )


def check_rank_range(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = [r.rank for r in records if r.rank is None or not 1 <= r.rank <= MAX_RANK]
    return _result('rank_range', f"Every rank is between 1 and {MAX_RANK}", offenders)


def _ranks_by_region_date(records: Iterable[CleanRecord]) -> dict[tuple[str, Optional[date]], list[Optional[int]]]:
    grouped: dict[tuple[str, Optional[date]], list[Optional[int]]] = defaultdict(list)
    for record in records:
        grouped[(record.region, record.episode_date)].append(record.rank)
    return grouped


def check_rank_unique(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = []
    for (region, episode_date), ranks in _ranks_by_region_date(records).items():
        seen: set[Optional[int]] = set()
        for rank in ranks:
            if rank in seen:
                offenders.append((region, episode_date, rank))
            seen.add(rank)
    return _result(
        'rank_unique_per_region_date',
        "No rank appears twice for the same region and date",
        offenders,
    )


def check_rank_complete(records: Sequence[CleanRecord]) -> CheckResult:
    expected = set(range(1, MAX_RANK + 1))
    offenders = [
        (region, episode_date, len(set(ranks)))
        for (region, episode_date), ranks in _ranks_by_region_date(records).items()
        if set(ranks) != expected
    ]
    return _result(
        'rank_complete_per_region_date',
        f"Each region and date has exactly the ranks 1..{MAX_RANK}",
        offenders,
    )


def check_region_closed(records: Sequence[CleanRecord], lookups: SilverLookups) -> CheckResult:
    allowed = lookups.region_names | {UNKNOWN}
    offenders = sorted({r.region for r in records if r.region not in allowed})
    return _result('region_closed', "Every region is a known region name or Unknown", offenders)


def check_region_count(records: Sequence[CleanRecord], lookups: SilverLookups) -> CheckResult:
    present = {r.region for r in records if r.region in lookups.region_names}
    missing = sorted(lookups.region_names - present)
    result = _result(
        'region_count',
        f"All {EXPECTED_REGION_COUNT} chart regions are present",
        missing,
    )
    if len(present) != EXPECTED_REGION_COUNT:
        result.passed = False
        result.failures = max(result.failures, 1)
    return result


def check_chart_move_trimmed(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = [
        r.chart_move for r in records
        if r.chart_move is not None and r.chart_move != r.chart_move.strip()
    ]
    return _result('chart_move_trimmed', "chart_move has no surrounding whitespace", offenders)


def check_chart_move_no_digits(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = [
        r.chart_move for r in records
        if r.chart_move is not None and _DIGIT.search(r.chart_move)
    ]
    return _result('chart_move_no_digits', "chart_move never contains digits", offenders)


def check_narrative_placeholders(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = []
    for record in records:
        for field_name in NARRATIVE_FIELDS:
            value = getattr(record, field_name)
            if value is None or value.strip() in PLACEHOLDER_VALUES:
                offenders.append((record.episode_id, field_name, value))
    return _result(
        'narrative_no_placeholders',
        "Titles, descriptions and publisher are never null, empty, 'N/A' or 'null'",
        offenders,
    )


def check_show_id_single_title(records: Sequence[CleanRecord]) -> CheckResult:
    titles: dict[Optional[str], set[str]] = defaultdict(set)
    for record in records:
        titles[record.canonical_show_id].add(record.show_title)
    offenders = [
        (show_id, sorted(names)) for show_id, names in titles.items() if len(names) > 1
    ]
    return _result(
        'show_id_single_title',
        "Each canonical show id maps to a single show title",
        offenders,
    )


def check_no_mojibake(records: Sequence[CleanRecord]) -> CheckResult:
    offenders = [r.episode_title for r in records if 'â€' in r.episode_title]
    return _result('no_mojibake', "Episode titles contain no mis-decoded UTF-8", offenders)


CHECKS: tuple[Callable[..., CheckResult], ...] = (
    check_rank_range,
    check_rank_unique,
    check_rank_complete,
    check_region_closed,
    check_region_count,
    check_chart_move_trimmed,
    check_chart_move_no_digits,
    check_narrative_placeholders,
    check_show_id_single_title,
    check_no_mojibake,
)

_NEEDS_LOOKUPS = {check_region_closed, check_region_count}


def run_checks(records: Sequence[CleanRecord], lookups: SilverLookups) -> list[CheckResult]:
    """
    Run every data-quality check against the silver records.

    Returns:
        One CheckResult per check, in a stable order
    """
    results = []
    for check in CHECKS:
        result = check(records, lookups) if check in _NEEDS_LOOKUPS else check(records)
        if result.passed:
            logger.debug("Quality check passed", extra={'check': result.name})
        else:
            logger.warning(
                "Quality check failed",
                extra={
                    'check': result.name,
                    'failures': result.failures,
                    'samples': result.samples,
                }
            )
        results.append(result)
    return results
