"""
Lookup Table Loader for the Silver Stage

This module loads and validates the static lookup tables from lookups.yml:
- regions: chart region code -> region name
- languages: language family -> exact `languages` literals
- undetermined_languages: literals that mean "language unknown"
- show_overrides: canonical show id -> corrected show title

The file ships inside the package so the tables are versioned together with
the cleaning logic.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LOOKUPS_PATH = Path(__file__).resolve().parent / "lookups.yml"


@dataclass(frozen=True)
class SilverLookups:
    """All static tables consulted by the normalizer. Read-only once built."""

    regions: Mapping[str, str] = field(default_factory=dict)
    language_literals: Mapping[str, str] = field(default_factory=dict)
    undetermined_languages: frozenset[str] = frozenset()
    show_overrides: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Frozen instances only block attribute assignment, so freeze the tables too
        for name in ("regions", "language_literals", "show_overrides"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(self, "undetermined_languages", frozenset(self.undetermined_languages))

    @property
    def region_names(self) -> frozenset[str]:
        return frozenset(self.regions.values())

    @property
    def language_families(self) -> frozenset[str]:
        return frozenset(self.language_literals.values())

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "SilverLookups":
        """
        Create SilverLookups from the parsed YAML document.

        Raises:
            ValueError: If a section has the wrong shape or a language literal
                        is assigned to more than one family
        """
        regions = _string_mapping(config_dict.get("regions", {}), "regions")
        # Matching is done on the lower-cased raw code
        regions = {code.lower(): name for code, name in regions.items()}

        languages = config_dict.get("languages", {})
        if not isinstance(languages, dict):
            raise ValueError("languages must be a mapping of family -> list of literals")

        language_literals: dict[str, str] = {}
        for family, literals in languages.items():
            if not isinstance(literals, list):
                raise ValueError(f"languages.{family} must be a list of literals")
            for literal in literals:
                literal = str(literal)
                existing = language_literals.get(literal)
                if existing is not None and existing != family:
                    raise ValueError(
                        f"Language literal {literal!r} is mapped to both {existing!r} and {family!r}"
                    )
                language_literals[literal] = str(family)

        undetermined = config_dict.get("undetermined_languages", [])
        if not isinstance(undetermined, list):
            raise ValueError("undetermined_languages must be a list")

        overrides = _string_mapping(config_dict.get("show_overrides", {}), "show_overrides")
        overrides = {show_id.strip().lower(): title for show_id, title in overrides.items()}

        return cls(
            regions=regions,
            language_literals=language_literals,
            undetermined_languages=frozenset(str(v) for v in undetermined),
            show_overrides=overrides,
        )


def _string_mapping(value: Any, section: str) -> dict[str, str]:
    """Validate a YAML mapping section and coerce keys and values to str."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{section} must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def load_silver_lookups(config_path: Optional[str] = None) -> SilverLookups:
    """
    Load the lookup tables from YAML.

    Args:
        config_path: Path to a lookups YAML file. If None, uses the file
                     bundled with the package.

    Returns:
        SilverLookups with all tables populated

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config is invalid

    Example:
        >>> lookups = load_silver_lookups()
        >>> lookups.regions['jp']
        'Japan'
    """
    path = Path(config_path) if config_path else DEFAULT_LOOKUPS_PATH

    logger.info("Loading silver lookup tables", extra={'config_path': str(path)})

    if not path.exists():
        logger.error(f"Lookup file not found: {path}")
        raise FileNotFoundError(f"Lookup file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in lookup file: {e}") from e

    if not config_dict:
        logger.warning("Empty lookup file, every value will map to a sentinel")
        config_dict = {}

    if not isinstance(config_dict, dict):
        raise ValueError("Lookup file must contain a mapping at the top level")

    lookups = SilverLookups.from_dict(config_dict)

    logger.info(
        "Silver lookup tables loaded",
        extra={
            'regions': len(lookups.regions),
            'language_literals': len(lookups.language_literals),
            'show_overrides': len(lookups.show_overrides),
        }
    )

    return lookups
