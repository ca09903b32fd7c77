"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import LeadScopeConfig
from core.errors import LeadScopeConfigError, LeadScopeIngestError
from core.s3_uri import parse_s3_uri


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fall back to documented defaults."""
    for name in (
        "LEADSCOPE_MIN_DATA_POINTS",
        "LEADSCOPE_PATH_DELIMITER",
        "LEADSCOPE_MANUFACTURER_ALIASES",
        "LEADSCOPE_STRICT_HIERARCHY",
    ):
        monkeypatch.delenv(name, raising=False)

    config = LeadScopeConfig.from_env()

    assert config.min_data_points == 10
    assert config.path_delimiter == " > "
    assert config.aliases_path is None
    assert config.strict_hierarchy is False


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve overrides from environment."""
    monkeypatch.setenv("LEADSCOPE_MIN_DATA_POINTS", "3")
    monkeypatch.setenv("LEADSCOPE_MANUFACTURER_ALIASES", "./aliases.yaml")
    monkeypatch.setenv("LEADSCOPE_STRICT_HIERARCHY", "yes")

    config = LeadScopeConfig.from_env()

    assert config.min_data_points == 3
    assert config.aliases_path is not None and config.aliases_path.name == "aliases.yaml"
    assert config.strict_hierarchy is True


def test_from_env_raises_for_invalid_min_data_points(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric minimum data points."""
    monkeypatch.setenv("LEADSCOPE_MIN_DATA_POINTS", "not-a-number")

    with pytest.raises(LeadScopeConfigError):
        LeadScopeConfig.from_env()

    assert os.getenv("LEADSCOPE_MIN_DATA_POINTS") == "not-a-number"


def test_from_env_raises_for_invalid_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unrecognized boolean flags."""
    monkeypatch.setenv("LEADSCOPE_STRICT_HIERARCHY", "sometimes")

    with pytest.raises(LeadScopeConfigError):
        LeadScopeConfig.from_env()


def test_parse_s3_uri_requires_prefix() -> None:
    """S3 sources must name both bucket and prefix."""
    assert parse_s3_uri("s3://bucket/quotes").prefix == "quotes"
    with pytest.raises(LeadScopeIngestError):
        parse_s3_uri("s3://bucket")
