"""
Unit Tests for silver record normalization

These tests validate the field cleaning rules in isolation, without a
database connection.

Test Organization:
- TestNormalizeRecord: End-to-end cleaning of one row
- TestRegion / TestLanguage: Controlled vocabularies
- TestNarrativeFields: Placeholder and corruption handling
- TestShowTitle: Override / corruption / placeholder cascade
- TestLabelsAndNumbers: Short labels and numeric coercion
- TestNormalizeRecords: Batch behavior (row count, identity, idempotence)
"""

import dataclasses
from datetime import date

import pytest

from podcast_etl.common.records import CleanRecord, RawRecord
from podcast_etl.silver.normalize import (
    clean_label,
    clean_narrative,
    clean_publisher,
    clean_show_title,
    normalize_language,
    normalize_record,
    normalize_records,
    normalize_region,
)


class TestNormalizeRecord:
    """Tests for cleaning a single well-formed row"""

    def test_well_formed_row(self, sample_raw_record, lookups):
        clean = normalize_record(sample_raw_record, "0QAw6rXkjbyAzjqnKkoVaJ", lookups)

        assert isinstance(clean, CleanRecord)
        assert clean.episode_date == date(2024, 9, 10)
        assert clean.rank == 1
        assert clean.region == "United Kingdom"
        assert clean.chart_move == "UP"
        assert clean.episode_id == "4rOoJ6Egrf8K2IrywzwOMk"
        assert clean.canonical_show_id == "0QAw6rXkjbyAzjqnKkoVaJ"
        assert clean.episode_title == "Trump vs Harris: the debate"
        assert clean.show_title == "The Rest Is Politics"
        assert clean.publisher == "Goalhanger Podcasts"
        assert clean.duration_ms == 3123456
        assert clean.explicit_flag == "False"
        assert clean.language_family == "English"
        assert clean.release_date == date(2024, 9, 10)
        assert clean.release_date_precision == "day"
        assert clean.media_type == "audio"
        assert clean.total_episodes == 612
        assert clean.loaded_at is None

    def test_empty_row_never_raises(self, lookups):
        clean = normalize_record(RawRecord(), None, lookups)

        assert clean.episode_date is None
        assert clean.rank is None
        assert clean.region == "Unknown"
        assert clean.chart_move is None
        assert clean.episode_title == "Unknown"
        assert clean.episode_description == "Unknown"
        assert clean.show_title == "Unknown"
        assert clean.show_description == "Unknown"
        assert clean.publisher == "Unknown"
        assert clean.duration_ms is None
        assert clean.explicit_flag == "Unknown"
        assert clean.language_family == "Unknown"
        assert clean.release_date is None
        assert clean.release_date_precision == "Unknown"
        assert clean.media_type == "Unknown"
        assert clean.total_episodes is None

    def test_chart_move_is_only_trimmed(self, lookups):
        clean = normalize_record(RawRecord(chart_move="  New Entry  "), None, lookups)
        assert clean.chart_move == "New Entry"

    def test_episode_id_passes_through(self, lookups):
        clean = normalize_record(RawRecord(episode_id=" abc "), None, lookups)
        assert clean.episode_id == " abc "

    def test_numeric_coercion_example(self, lookups):
        good = normalize_record(RawRecord(duration_ms_text="123456.0"), None, lookups)
        bad = normalize_record(RawRecord(duration_ms_text="abc"), None, lookups)

        assert good.duration_ms == 123456
        assert bad.duration_ms is None

    def test_unparseable_release_date_is_null(self, lookups):
        clean = normalize_record(RawRecord(release_date_text="2024-13-40"), None, lookups)
        assert clean.release_date is None

    def test_year_precision_release_date(self, lookups):
        raw = RawRecord(release_date_text="2019", release_date_precision_text="year")
        clean = normalize_record(raw, None, lookups)

        assert clean.release_date == date(2019, 1, 1)
        assert clean.release_date_precision == "year"

    def test_episode_date_stays_strict(self, lookups):
        assert normalize_record(RawRecord(episode_date="2019"), None, lookups).episode_date is None


class TestRegion:
    """Tests for region code decoding"""

    @pytest.mark.parametrize("code,expected", [
        ("jp", "Japan"),
        ("JP", "Japan"),
        ("us", "United States"),
        ("gb", "United Kingdom"),
        ("nz", "New Zealand"),
        ("in", "India"),
    ])
    def test_known_codes(self, code, expected, lookups):
        assert normalize_region(code, lookups) == expected

    @pytest.mark.parametrize("code", ["xx", "uk", " jp", "", None])
    def test_unknown_codes(self, code, lookups):
        assert normalize_region(code, lookups) == "Unknown"

    def test_table_has_22_regions(self, lookups):
        assert len(lookups.regions) == 22
        assert sorted(lookups.regions) == [
            "ar", "at", "au", "br", "ca", "cl", "co", "de", "es", "fr", "gb",
            "id", "ie", "in", "it", "jp", "mx", "nl", "nz", "ph", "pl", "us",
        ]


class TestLanguage:
    """Tests for language literal mapping"""

    @pytest.mark.parametrize("literal,expected", [
        ("['en']", "English"),
        ("['en-US']", "English"),
        ("['es-MX']", "Spanish"),
        ("['pt-BR']", "Portuguese"),
        ("['ja-JP']", "Japanese"),
        ("['fil']", "Filipino"),
        ("['eu-ES']", "Basque"),
        ("['ca']", "Catalan"),
    ])
    def test_known_literals(self, literal, expected, lookups):
        assert normalize_language(literal, lookups) == expected

    def test_undetermined_is_unknown(self, lookups):
        assert normalize_language("['und']", lookups) == "Unknown"

    def test_missing_is_unknown(self, lookups):
        assert normalize_language(None, lookups) == "Unknown"

    @pytest.mark.parametrize("literal", ["['en', 'es']", "['xx']", "en", "['EN']"])
    def test_unmatched_is_other(self, literal, lookups):
        assert normalize_language(literal, lookups) == "Other"


class TestNarrativeFields:
    """Tests for placeholder and corruption handling in free text"""

    @pytest.mark.parametrize("value", [
        None,
        "",
        "   ",
        "N/A",
        " N/A ",
        "null",
        "?",
        "???",
        "?? a-LunA ??",
    ])
    def test_placeholders_become_unknown(self, value):
        assert clean_narrative(value) == "Unknown"

    @pytest.mark.parametrize("value,expected", [
        ("  Hello  ", "Hello"),
        ("Who did it?", "Who did it?"),
        ("n/a", "n/a"),
        ("NULL", "NULL"),
        ("Null", "Null"),
    ])
    def test_real_text_is_trimmed(self, value, expected):
        assert clean_narrative(value) == expected


class TestShowTitle:
    """Tests for the three-stage show title cascade"""

    def test_override_wins_over_corruption(self, lookups):
        assert clean_show_title("???", "0qaw6rxkjbyazjqnkkovaj", lookups) == "The Rest Is Politics"

    def test_override_matches_lowercased_trimmed_id(self, lookups):
        assert clean_show_title(None, "  0QAW6RXKJBYAZJQNKKOVAJ ", lookups) == "The Rest Is Politics"

    def test_override_text_is_used_verbatim(self, lookups):
        # The override itself contains "??" and must not be re-checked
        assert clean_show_title("x", "0vexaznsdn2s7umiiuw41m", lookups) == "Chiquillas, un cafecito??"

    def test_override_with_apostrophe(self, lookups):
        assert clean_show_title(None, "6uvnib9rxunnonyzgzk9", lookups) == "Que no surti d'aquí"

    @pytest.mark.parametrize("value", [
        "???",
        "?? a-LunA ??",
        "Great show??",
        "?Leading",
        "Mid ?? dle",
    ])
    def test_corrupted_titles(self, value, lookups):
        assert clean_show_title(value, "not-overridden", lookups) == "Unknown"

    def test_single_question_mark_is_legitimate(self, lookups):
        assert clean_show_title("Who Did It?", "not-overridden", lookups) == "Who Did It?"

    @pytest.mark.parametrize("value", [None, "", "  ", "N/A", "null"])
    def test_placeholders(self, value, lookups):
        assert clean_show_title(value, "not-overridden", lookups) == "Unknown"

    def test_plain_title_is_trimmed(self, lookups):
        assert clean_show_title("  Huberman Lab ", None, lookups) == "Huberman Lab"


class TestLabelsAndNumbers:
    """Tests for short label columns"""

    @pytest.mark.parametrize("value,expected", [
        (None, "Unknown"),
        ("", "Unknown"),
        ("   ", "Unknown"),
        (" audio ", "audio"),
        ("True", "True"),
        ("N/A", "N/A"),
    ])
    def test_clean_label(self, value, expected):
        assert clean_label(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (" Spotify Studios ", "Spotify Studios"),
        ("?uestlove Media", "?uestlove Media"),
        (None, "Unknown"),
        ("", "Unknown"),
        ("   ", "Unknown"),
        ("N/A", "Unknown"),
        (" null ", "Unknown"),
    ])
    def test_clean_publisher(self, value, expected):
        assert clean_publisher(value) == expected

    def test_publisher_placeholders_become_unknown(self, lookups):
        for value in ("N/A", "null"):
            assert normalize_record(RawRecord(publisher=value), None, lookups).publisher == "Unknown"

    def test_total_episodes(self, lookups):
        assert normalize_record(RawRecord(total_episodes_text="250.0"), None, lookups).total_episodes == 250
        assert normalize_record(RawRecord(total_episodes_text=""), None, lookups).total_episodes is None


class TestNormalizeRecords:
    """Tests for batch normalization"""

    def test_identity_grouping_example(self, lookups):
        rows = [
            RawRecord(show_title="All Night Nippon", publisher="P", episode_date="2024-01-01", show_id="X"),
            RawRecord(show_title="All Night Nippon", publisher="P", episode_date="2024-01-05", show_id="Y"),
        ]
        clean = normalize_records(rows, lookups)

        assert [c.canonical_show_id for c in clean] == ["Y", "Y"]

    def test_override_applies_to_every_row_of_resolved_group(self, lookups):
        rows = [
            RawRecord(show_title="???", publisher="Goalhanger", episode_date="2024-01-01", show_id="stale-id"),
            RawRecord(show_title="???", publisher="Goalhanger", episode_date="2024-01-05", show_id="0QAw6rXkjbyAzjqnKkoVaJ"),
        ]
        clean = normalize_records(rows, lookups)

        assert [c.show_title for c in clean] == ["The Rest Is Politics", "The Rest Is Politics"]

    def test_row_count_preserved(self, full_chart_snapshot, lookups):
        clean = normalize_records(full_chart_snapshot, lookups)
        assert len(clean) == len(full_chart_snapshot)

    def test_idempotent(self, full_chart_snapshot, lookups):
        first = normalize_records(full_chart_snapshot, lookups)
        second = normalize_records(full_chart_snapshot, lookups)

        assert first == second

    def test_drifted_ids_resolve_to_latest_snapshot(self, full_chart_snapshot, lookups):
        clean = normalize_records(full_chart_snapshot, lookups)
        assert {c.canonical_show_id.split("-")[0] for c in clean} == {"new"}

    def test_sentinels_never_leak(self, lookups):
        rows = [
            RawRecord(episode_title=value, episode_description=value, show_title=value,
                      show_description=value, publisher=value)
            for value in (None, "", "  ", "N/A", "null")
        ]
        for clean in normalize_records(rows, lookups):
            for field_name in ("episode_title", "episode_description", "show_title",
                               "show_description", "publisher"):
                assert getattr(clean, field_name) == "Unknown"

    def test_region_closure(self, lookups):
        rows = [RawRecord(region_code=code) for code in ("jp", "US", "zz", None, "")]
        allowed = set(lookups.regions.values()) | {"Unknown"}

        assert all(c.region in allowed for c in normalize_records(rows, lookups))

    def test_loaded_at_left_for_writer(self, sample_raw_record, lookups):
        clean = normalize_records([sample_raw_record], lookups)[0]
        assert dataclasses.asdict(clean)["loaded_at"] is None
