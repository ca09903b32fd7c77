"""Manufacturer name normalization policy.

This module maps raw manufacturer spellings onto canonical names before
records reach the expansion transform. The alias table is data loaded
from YAML; matching is exact first, then case-insensitive where the
folded spelling is unambiguous, then a light cleanup heuristic.
"""

from __future__ import annotations

from dataclasses import replace
import json
from pathlib import Path
import re
from typing import Iterable, Mapping, cast

from core.constants import DEFAULT_PLACEHOLDER_MANUFACTURERS, SUPPORTED_ALIAS_EXTENSIONS
from core.errors import LeadScopeDependencyError, LeadScopeIngestError
from core.logging_config import get_logger
from core.types import ManufacturerConsolidation, RawQuoteRecord

_LOGGER = get_logger(__name__)
_WHITESPACE_PATTERN = re.compile(r"\s+")


class ManufacturerNormalizer:
    """Swappable alias-table normalizer for manufacturer names."""

    def __init__(
        self,
        aliases: Mapping[str, str] | None = None,
        placeholders: Iterable[str] = DEFAULT_PLACEHOLDER_MANUFACTURERS,
    ) -> None:
        self._aliases = {key.strip(): value.strip() for key, value in (aliases or {}).items()}
        self._placeholders = frozenset(token.strip().casefold() for token in placeholders)
        self._folded_aliases, self._collisions = _build_folded_index(self._aliases)
        for folded_key in self._collisions:
            _LOGGER.warning(
                "manufacturer_alias_collision",
                folded_key=folded_key,
                canonical_names=sorted(
                    {value for key, value in self._aliases.items() if key.casefold() == folded_key}
                ),
            )

    @property
    def collisions(self) -> tuple[str, ...]:
        """Case-folded alias keys that map to conflicting canonical names."""
        return self._collisions

    def normalize(self, raw_name: str) -> str:
        """Return the canonical name, or ``""`` for placeholders.

        Args:
            raw_name: Manufacturer text as quoted.

        Returns:
            Canonical manufacturer name, empty for placeholder tokens.
        """
        cleaned = raw_name.strip()
        if cleaned in self._aliases:
            return self._aliases[cleaned]
        folded = cleaned.casefold()
        if folded in self._placeholders:
            return ""
        if folded in self._folded_aliases:
            return self._folded_aliases[folded]
        return _fallback_cleanup(cleaned)


def load_manufacturer_normalizer(alias_path: str | Path) -> ManufacturerNormalizer:
    """Load an alias table from YAML.

    The file holds an ``aliases`` mapping of raw spelling to canonical
    name and an optional ``placeholders`` list replacing the defaults.

    Args:
        alias_path: Path to the YAML alias table.

    Returns:
        Configured normalizer.

    Raises:
        LeadScopeDependencyError: If PyYAML is unavailable.
        LeadScopeIngestError: If the file is missing or malformed.
    """
    path = Path(alias_path).expanduser()
    payload = _load_yaml_payload(path)
    if not isinstance(payload, dict):
        raise LeadScopeIngestError(
            f"Invalid alias table at {path}: expected a mapping with an 'aliases' key."
        )
    aliases = payload.get("aliases", {})
    if not isinstance(aliases, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in aliases.items()
    ):
        raise LeadScopeIngestError(
            f"Invalid alias table at {path}: 'aliases' must map strings to strings."
        )
    placeholders = payload.get("placeholders", list(DEFAULT_PLACEHOLDER_MANUFACTURERS))
    if not isinstance(placeholders, list) or not all(
        isinstance(token, str) for token in placeholders
    ):
        raise LeadScopeIngestError(
            f"Invalid alias table at {path}: 'placeholders' must be a list of strings."
        )
    return ManufacturerNormalizer(cast(dict[str, str], aliases), placeholders)


def normalize_quote_record(
    record: RawQuoteRecord,
    normalizer: ManufacturerNormalizer,
) -> RawQuoteRecord:
    """Normalize a record's manufacturer list and drop blank results.

    Records whose manufacturer field is not a JSON list of strings are
    returned unchanged so the expansion transform can reject them.
    """
    try:
        names = json.loads(record.manufacturers or "[]")
    except json.JSONDecodeError:
        return record
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        return record
    normalized = [normalizer.normalize(name) for name in names]
    cleaned = [name for name in normalized if name.strip()]
    return replace(record, manufacturers=json.dumps(cleaned))


def normalize_quote_records(
    records: Iterable[RawQuoteRecord],
    normalizer: ManufacturerNormalizer,
) -> list[RawQuoteRecord]:
    """Normalize manufacturer names for a batch of records.

    Logs how many distinct spellings were consolidated.
    """
    raw_records = list(records)
    normalized = [normalize_quote_record(record, normalizer) for record in raw_records]
    consolidation = summarize_consolidation(raw_records, normalized)
    _LOGGER.info(
        "manufacturer_names_consolidated",
        distinct_before=consolidation.distinct_before,
        distinct_after=consolidation.distinct_after,
        reduction=consolidation.reduction,
    )
    return normalized


def summarize_consolidation(
    raw_records: Iterable[RawQuoteRecord],
    normalized_records: Iterable[RawQuoteRecord],
) -> ManufacturerConsolidation:
    """Count distinct manufacturer names before and after normalization.

    Blank names and malformed manufacturer lists are not counted.

    Args:
        raw_records: Records as read from the source.
        normalized_records: The same records after normalization.

    Returns:
        Distinct counts and the resulting reduction.
    """
    return ManufacturerConsolidation(
        distinct_before=len(_distinct_manufacturers(raw_records)),
        distinct_after=len(_distinct_manufacturers(normalized_records)),
    )


def _distinct_manufacturers(records: Iterable[RawQuoteRecord]) -> set[str]:
    """Collect trimmed, non-blank manufacturer names from well-formed lists."""
    names: set[str] = set()
    for record in records:
        try:
            payload = json.loads(record.manufacturers or "[]")
        except json.JSONDecodeError:
            continue
        if isinstance(payload, list):
            names.update(
                name.strip() for name in payload if isinstance(name, str) and name.strip()
            )
    return names


def _build_folded_index(
    aliases: Mapping[str, str],
) -> tuple[dict[str, str], tuple[str, ...]]:
    """Index aliases by case-folded key, excluding conflicting keys."""
    candidates: dict[str, set[str]] = {}
    for key, value in aliases.items():
        candidates.setdefault(key.casefold(), set()).add(value)
    folded = {key: next(iter(values)) for key, values in candidates.items() if len(values) == 1}
    collisions = tuple(sorted(key for key, values in candidates.items() if len(values) > 1))
    return folded, collisions


def _fallback_cleanup(name: str) -> str:
    """Collapse whitespace and title-case all-caps names longer than two characters."""
    collapsed = _WHITESPACE_PATTERN.sub(" ", name).strip()
    if len(collapsed) > 2 and collapsed == collapsed.upper() and collapsed != collapsed.lower():
        return " ".join(word.capitalize() for word in collapsed.lower().split(" "))
    return collapsed


def _load_yaml_payload(path: Path) -> object:
    """Read and parse a YAML file."""
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:
        raise LeadScopeDependencyError(
            "Alias table support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    if not path.exists():
        raise LeadScopeIngestError(
            f"Alias table not found at {path}. Provide an existing YAML file."
        )
    if path.suffix.lower() not in SUPPORTED_ALIAS_EXTENSIONS:
        raise LeadScopeIngestError(
            f"Unsupported alias table {path}: expected one of {SUPPORTED_ALIAS_EXTENSIONS}."
        )
    try:
        return cast(object, yaml.safe_load(path.read_text(encoding="utf-8")))
    except yaml.YAMLError as error:
        raise LeadScopeIngestError(f"Failed to parse alias table at {path}: {error}") from error
