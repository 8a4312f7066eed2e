"""
Show Identity Resolution

A show's id can change between chart snapshots while the show itself stays
the same ("id drift"). This module groups raw rows by the show's human
identity, (show_title, publisher), and picks one canonical show id per group:
the id carried by the group's most recent row.

Key Concepts:
- Verbatim keys: titles and publishers are compared exactly as ingested
  (case and whitespace sensitive), since this runs before any cleaning
- Null grouping: None groups with None, never with ""
- Deterministic ties: when several rows share the latest date, the
  lexicographically smallest show id wins; a missing id loses to any real id
- One pass: each group keeps only its current best row, lookups are O(1)

The resolver needs the complete input of a run before it can answer for any
record, so it is built once from all rows and then queried per record.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from podcast_etl.common.coercion import parse_date
from podcast_etl.common.records import RawRecord

logger = logging.getLogger(__name__)

IdentityKey = tuple[Optional[str], Optional[str]]


@dataclass
class ShowIdentityGroup:
    """All raw rows sharing one (show_title, publisher) identity."""

    show_title: Optional[str]
    publisher: Optional[str]
    canonical_show_id: Optional[str] = None
    latest_episode_date: Optional[date] = None
    member_count: int = 0
    raw_show_ids: set[Optional[str]] = field(default_factory=set)

    @property
    def key(self) -> IdentityKey:
        return (self.show_title, self.publisher)

    @property
    def has_drift(self) -> bool:
        """True when the group saw more than one raw show id."""
        return len(self.raw_show_ids) > 1

    def add(self, record: RawRecord) -> None:
        """Fold one record into the group, keeping the best candidate id."""
        self.member_count += 1
        self.raw_show_ids.add(record.show_id)

        episode_date = parse_date(record.episode_date)
        if self.member_count == 1 or _is_better(
            episode_date, record.show_id, self.latest_episode_date, self.canonical_show_id
        ):
            self.latest_episode_date = episode_date
            self.canonical_show_id = record.show_id


def _is_better(
    new_date: Optional[date],
    new_id: Optional[str],
    best_date: Optional[date],
    best_id: Optional[str],
) -> bool:
    """Compare a candidate against the current best: later date, then smaller id."""
    # Unparseable dates sort below every real date
    new_rank = new_date or date.min
    best_rank = best_date or date.min
    if new_rank != best_rank:
        return new_rank > best_rank

    if new_id is None:
        return False
    if best_id is None:
        return True
    return new_id < best_id


class ShowIdentityResolver:
    """
    Maps every raw record to the canonical show id of its identity group.

    Usage:
        resolver = ShowIdentityResolver.from_records(raw_records)
        show_id = resolver.canonical_show_id(raw_records[0])
    """

    def __init__(self, groups: dict[IdentityKey, ShowIdentityGroup]):
        self._groups = groups

    @classmethod
    def from_records(cls, records: Iterable[RawRecord]) -> "ShowIdentityResolver":
        """Partition the records by identity and reduce each group to its latest id."""
        groups: dict[IdentityKey, ShowIdentityGroup] = {}
        for record in records:
            key = (record.show_title, record.publisher)
            group = groups.get(key)
            if group is None:
                group = ShowIdentityGroup(show_title=record.show_title, publisher=record.publisher)
                groups[key] = group
            group.add(record)

        resolver = cls(groups)

        logger.info(
            "Resolved show identities",
            extra={
                'groups': len(groups),
                'drifted_groups': resolver.drifted_group_count,
            }
        )
        return resolver

    @property
    def groups(self) -> list[ShowIdentityGroup]:
        return list(self._groups.values())

    @property
    def drifted_group_count(self) -> int:
        return sum(1 for group in self._groups.values() if group.has_drift)

    def group_for(self, record: RawRecord) -> Optional[ShowIdentityGroup]:
        return self._groups.get((record.show_title, record.publisher))

    def canonical_show_id(self, record: RawRecord) -> Optional[str]:
        """
        Return the canonical show id for a record.

        A record that was not part of the resolver's input keeps its own
        raw show id.
        """
        group = self.group_for(record)
        if group is None:
            return record.show_id
        return group.canonical_show_id
