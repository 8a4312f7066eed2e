"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

import os
from datetime import date, timedelta

import pytest

from podcast_etl.common.records import RawRecord
from podcast_etl.silver.lookups import SilverLookups, load_silver_lookups


@pytest.fixture(scope="session")
def database_url() -> str:
    """
    Provide database URL for integration tests.

    Uses TEST_DATABASE_URL so a developer database is never touched by accident.

    Returns:
        str: PostgreSQL connection URL or empty string when not configured
    """
    return os.getenv("TEST_DATABASE_URL", "")


@pytest.fixture(scope="session")
def lookups() -> SilverLookups:
    """The lookup tables bundled with the package."""
    return load_silver_lookups()


@pytest.fixture(scope="function")
def sample_raw_record() -> RawRecord:
    """
    Provide a typical, well-formed bronze row.

    Scope: function (created fresh for each test)
    """
    return RawRecord(
        episode_date="2024-09-10",
        rank="1",
        region_code="gb",
        chart_move="UP",
        episode_id="4rOoJ6Egrf8K2IrywzwOMk",
        show_id="0QAw6rXkjbyAzjqnKkoVaJ",
        episode_title="  Trump vs Harris: the debate  ",
        episode_description="Rory and Alastair discuss the debate.",
        show_title="The Rest Is Politics",
        show_description="Two political heavyweights disagree agreeably.",
        publisher="Goalhanger Podcasts",
        duration_ms_text="3123456.0",
        explicit_flag_text="False",
        languages_text="['en-GB']",
        release_date_text="2024-09-10",
        release_date_precision_text="day",
        media_type_text="audio",
        total_episodes_text="612.0",
    )


def build_chart_day(episode_date: date, region_code: str, show_id_prefix: str = "show") -> list[RawRecord]:
    """Build a complete 200-row chart for one region and day."""
    return [
        RawRecord(
            episode_date=episode_date.isoformat(),
            rank=str(rank),
            region_code=region_code,
            chart_move="SAME",
            episode_id=f"ep-{region_code}-{episode_date.isoformat()}-{rank}",
            show_id=f"{show_id_prefix}-{rank}",
            episode_title=f"Episode {rank}",
            episode_description=f"Description {rank}",
            show_title=f"Show {rank}",
            show_description=f"About show {rank}",
            publisher=f"Publisher {rank}",
            duration_ms_text="1800000.0",
            explicit_flag_text="False",
            languages_text="['en']",
            release_date_text=episode_date.isoformat(),
            release_date_precision_text="day",
            media_type_text="audio",
            total_episodes_text="100.0",
        )
        for rank in range(1, 201)
    ]


@pytest.fixture(scope="function")
def full_chart_snapshot(lookups) -> list[RawRecord]:
    """
    Two complete chart days for all 22 regions (8,800 rows).

    The show ids change between the two days to simulate identity drift.
    """
    first_day = date(2024, 9, 9)
    records = []
    for offset, prefix in ((0, "old"), (1, "new")):
        for region_code in sorted(lookups.regions):
            records.extend(build_chart_day(first_day + timedelta(days=offset), region_code, prefix))
    return records


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
