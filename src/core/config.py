"""Runtime configuration model for LeadScope.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_MIN_DATA_POINTS, DEFAULT_PATH_DELIMITER
from core.errors import LeadScopeConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class LeadScopeConfig:
    """Validated runtime configuration.

    Attributes:
        min_data_points: Minimum observations for a key to be ranked.
        path_delimiter: Separator between segments of category tree paths.
        aliases_path: Optional YAML manufacturer alias table.
        strict_hierarchy: Raise on orphaned categories instead of warning.
        s3_region: Optional default AWS region for S3 reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    min_data_points: int
    path_delimiter: str
    aliases_path: Path | None
    strict_hierarchy: bool
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "LeadScopeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LeadScopeConfigError: If environment values are invalid.
        """
        min_data_points = _parse_min_data_points(
            os.getenv("LEADSCOPE_MIN_DATA_POINTS", str(DEFAULT_MIN_DATA_POINTS))
        )
        path_delimiter = _parse_path_delimiter(
            os.getenv("LEADSCOPE_PATH_DELIMITER", DEFAULT_PATH_DELIMITER)
        )
        aliases_value = os.getenv("LEADSCOPE_MANUFACTURER_ALIASES")
        strict_hierarchy = _parse_bool(
            "LEADSCOPE_STRICT_HIERARCHY", os.getenv("LEADSCOPE_STRICT_HIERARCHY", "false")
        )
        return cls(
            min_data_points=min_data_points,
            path_delimiter=path_delimiter,
            aliases_path=Path(aliases_value).expanduser() if aliases_value else None,
            strict_hierarchy=strict_hierarchy,
            s3_region=os.getenv("LEADSCOPE_S3_REGION"),
            s3_profile=os.getenv("LEADSCOPE_S3_PROFILE"),
        )


def _parse_min_data_points(raw_value: str) -> int:
    """Parse the minimum data points environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed non-negative integer.

    Raises:
        LeadScopeConfigError: If value is not a non-negative integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise LeadScopeConfigError(
            "Invalid LEADSCOPE_MIN_DATA_POINTS value: "
            f"expected integer, got '{raw_value}'. "
            "Set LEADSCOPE_MIN_DATA_POINTS to a numeric value."
        ) from error
    if value < 0:
        raise LeadScopeConfigError(
            "Invalid LEADSCOPE_MIN_DATA_POINTS value: "
            f"expected a value >= 0, got {value}."
        )
    return value


def _parse_path_delimiter(raw_value: str) -> str:
    """Validate the category path delimiter."""
    if not raw_value.strip():
        raise LeadScopeConfigError(
            "Invalid LEADSCOPE_PATH_DELIMITER value: delimiter must contain "
            "at least one non-whitespace character, e.g. ' > '."
        )
    return raw_value


def _parse_bool(name: str, raw_value: str) -> bool:
    """Parse a boolean flag from environment text.

    Args:
        name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        LeadScopeConfigError: If value is not a recognized boolean.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise LeadScopeConfigError(
        f"Invalid {name} value: expected a boolean such as 'true' or 'false', "
        f"got '{raw_value}'."
    )
