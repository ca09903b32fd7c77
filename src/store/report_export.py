"""Analysis report persistence.

This module writes the summary tables of an analysis run as JSON files
for downstream dashboard and spreadsheet renderers. Lead-time figures
are rounded here, at the presentation boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, Mapping

from analysis.summary_stats import present_stats, round_presentation
from core.constants import (
    CATEGORY_MANUFACTURER_SUMMARY_FILE_NAME,
    CATEGORY_SERIES_FILE_NAME,
    CATEGORY_SUMMARY_FILE_NAME,
    MANUFACTURER_SERIES_FILE_NAME,
    MANUFACTURER_SUMMARY_FILE_NAME,
    MONTHLY_SUMMARY_FILE_NAME,
    REPORT_MANIFEST_FILE_NAME,
    ROLLUP_SUMMARY_FILE_NAME,
)
from core.errors import LeadScopeExportError
from core.types import AggregateStats, AnalysisReport, TimeSeries


def write_analysis_report(report: AnalysisReport, output_dir: str | Path) -> Path:
    """Write every report table plus a manifest.

    Args:
        report: Completed analysis report.
        output_dir: Target directory, created when missing.

    Returns:
        Path of the written manifest file.

    Raises:
        LeadScopeExportError: If the directory or files cannot be written.
    """
    target_dir = Path(output_dir).expanduser()
    tables = {
        CATEGORY_SUMMARY_FILE_NAME: _stats_table("component_type", report.category_stats),
        ROLLUP_SUMMARY_FILE_NAME: _rollup_table(report),
        MANUFACTURER_SUMMARY_FILE_NAME: _stats_table("manufacturer", report.manufacturer_stats),
        CATEGORY_MANUFACTURER_SUMMARY_FILE_NAME: _pair_table(report.category_manufacturer_stats),
        CATEGORY_SERIES_FILE_NAME: _series_payload(report.category_series),
        MANUFACTURER_SERIES_FILE_NAME: _series_payload(report.manufacturer_series),
        MONTHLY_SUMMARY_FILE_NAME: _monthly_payload(report),
    }
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        for file_name, payload in tables.items():
            _write_json(target_dir / file_name, payload)
        manifest_path = target_dir / REPORT_MANIFEST_FILE_NAME
        _write_json(manifest_path, _manifest_payload(report, sorted(tables)))
    except OSError as error:
        raise LeadScopeExportError(
            f"Failed to write analysis report to {target_dir}: {error}. "
            "Check that the output directory is writable."
        ) from error
    return manifest_path


def _stats_table(
    key_name: str,
    stats_by_key: Mapping[str, AggregateStats],
) -> list[dict[str, Any]]:
    """Build presentation rows ordered by data points descending, then key."""
    rows = [{key_name: key, **present_stats(stats)} for key, stats in stats_by_key.items()]
    rows.sort(key=lambda row: (-row["data_points"], row[key_name]))
    return rows


def _pair_table(
    pair_stats: Mapping[tuple[str, str], AggregateStats],
) -> list[dict[str, Any]]:
    """Build category x manufacturer rows grouped by category, most data first."""
    rows = [
        {"component_type": category, "manufacturer": manufacturer, **present_stats(stats)}
        for (category, manufacturer), stats in pair_stats.items()
    ]
    rows.sort(key=lambda row: (row["component_type"], -row["data_points"], row["manufacturer"]))
    return rows


def _rollup_table(report: AnalysisReport) -> list[dict[str, Any]]:
    """Build rolled-up rows with direct and descendant counts."""
    rows: list[dict[str, Any]] = []
    for rolled_up in report.rolled_up.values():
        row = {
            "component_type": rolled_up.category,
            "level": rolled_up.level,
            "tree_path": list(rolled_up.tree_path),
            **present_stats(rolled_up.stats),
            "direct_data_points": rolled_up.direct_count,
            "children_data_points": rolled_up.descendant_count,
        }
        rows.append(row)
    return rows


def _series_payload(time_series: TimeSeries) -> dict[str, Any]:
    """Serialize a monthly series, keeping months without data as null."""
    return {
        "dimension": time_series.dimension,
        "months": list(time_series.months),
        "series": {
            key: {
                month: present_stats(stats) if stats is not None else None
                for month, stats in monthly_stats.items()
            }
            for key, monthly_stats in time_series.series.items()
        },
    }


def _monthly_payload(report: AnalysisReport) -> dict[str, Any]:
    """Serialize monthly summaries with the weighted overall trend."""
    months = []
    for month, summary in report.monthly_summaries.items():
        trend_value = report.overall_trend.get(month)
        months.append(
            {
                "month": month,
                "total_observations": summary.observation_count,
                "unique_components": summary.unique_categories,
                "unique_manufacturers": summary.unique_manufacturers,
                "overall_trend_weeks": (
                    round_presentation(trend_value) if trend_value is not None else None
                ),
                **present_stats(summary.stats),
            }
        )
    return {"months": months, "trend_change": _trend_change_payload(report)}


def _trend_change_payload(report: AnalysisReport) -> dict[str, Any] | None:
    """Serialize the first-to-last month trend change."""
    change = report.trend_change
    if change is None:
        return None
    return {
        "first_month": change.first_month,
        "last_month": change.last_month,
        "first_value_weeks": round_presentation(change.first_value),
        "last_value_weeks": round_presentation(change.last_value),
        "delta_weeks": round_presentation(change.delta),
        "direction": change.direction,
    }


def _manifest_payload(report: AnalysisReport, file_names: list[str]) -> dict[str, Any]:
    """Build the run manifest."""
    expansion = report.expansion
    return {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "files": file_names,
        "months": list(expansion.months),
        "records_seen": expansion.records_seen,
        "records_dropped": expansion.records_dropped,
        "drop_reasons": dict(expansion.drop_reasons),
        "observation_count": len(expansion.observations),
        "top_categories": list(report.top_categories),
        "top_manufacturers": list(report.top_manufacturers),
        "orphan_categories": list(report.orphan_categories),
        "normalization_collisions": list(report.normalization_collisions),
        "manufacturer_consolidation": _consolidation_payload(report),
    }


def _consolidation_payload(report: AnalysisReport) -> dict[str, int] | None:
    """Serialize distinct manufacturer counts around normalization."""
    consolidation = report.manufacturer_consolidation
    if consolidation is None:
        return None
    return {
        "distinct_before": consolidation.distinct_before,
        "distinct_after": consolidation.distinct_after,
        "reduction": consolidation.reduction,
    }


def _write_json(path: Path, payload: object) -> None:
    """Write an indented JSON document."""
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
