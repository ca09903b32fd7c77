"""Unit tests for analysis report export."""

from __future__ import annotations

import json
from pathlib import Path

from core.config import LeadScopeConfig
from core.types import AnalysisOptions
from ingest.pipeline import run_analysis
from store.report_export import write_analysis_report
from tests.fixture_paths import fixture_path


def _report():
    options = AnalysisOptions(
        quotes_uri=str(fixture_path("quotes")),
        categories_uri=str(fixture_path("categories/component_types.csv")),
        aliases_path=str(fixture_path("manufacturer_aliases.yaml")),
        min_data_points=2,
    )
    return run_analysis(options, LeadScopeConfig.from_env())


def test_write_analysis_report_writes_manifest_and_tables(tmp_path: Path) -> None:
    """Export should write every table listed in the manifest."""
    manifest_path = write_analysis_report(_report(), tmp_path / "report")

    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))

    assert manifest_path.name == "manifest.json"
    assert all((manifest_path.parent / name).exists() for name in manifest["files"])
    assert manifest["records_dropped"] == 4
    assert manifest["orphan_categories"] == ["Valve"]


def test_write_analysis_report_keeps_missing_months_null(tmp_path: Path) -> None:
    """Months without data must serialize as null, never zero."""
    manifest_path = write_analysis_report(_report(), tmp_path)

    series = json.loads((tmp_path / "category_time_series.json").read_text(encoding="utf-8"))

    assert manifest_path.exists()
    assert series["series"]["Fan"]["2024-02"] is None
    assert series["series"]["Fan"]["2024-01"]["average_lead_time_weeks"] == 5.0


def test_write_analysis_report_orders_rollups_by_count(tmp_path: Path) -> None:
    """Rollup rows should carry direct and descendant counts."""
    write_analysis_report(_report(), tmp_path)

    rows = json.loads((tmp_path / "rollup_summary.json").read_text(encoding="utf-8"))

    assert rows[0]["component_type"] == "HVAC"
    assert rows[0]["direct_data_points"] == 0
    assert rows[0]["children_data_points"] == 5


def test_write_analysis_report_writes_supplier_pairs(tmp_path: Path) -> None:
    """Category x manufacturer rows should list each supplier of a category."""
    manifest_path = write_analysis_report(_report(), tmp_path)

    rows = json.loads((tmp_path / "category_manufacturer_summary.json").read_text(encoding="utf-8"))
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))

    fan_rows = [row for row in rows if row["component_type"] == "Fan"]
    assert [(row["manufacturer"], row["data_points"]) for row in fan_rows] == [("Greenheck", 2)]
    assert {row["manufacturer"] for row in rows if row["component_type"] == "Chiller"} == {
        "Armstrong",
        "Trane",
    }
    assert manifest["manufacturer_consolidation"] == {
        "distinct_before": 6,
        "distinct_after": 4,
        "reduction": 2,
    }
