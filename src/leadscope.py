"""Public SDK surface for LeadScope.

This module provides a stable import path for analysis users.
It re-exports the runner, typed option models, and core engine functions.
"""

from __future__ import annotations

from analysis.grouping import (
    aggregate_by_category,
    aggregate_by_category_manufacturer,
    aggregate_by_manufacturer,
    aggregate_rolled_up,
    aggregate_rolled_up_all,
    build_rolled_up_time_series,
    build_time_series,
    group_observations,
    manufacturers_by_category,
)
from analysis.ranking import rank, rank_time_series, series_totals
from analysis.summary_stats import aggregate, present_stats, round_presentation
from analysis.trends import monthly_summaries, overall_monthly_trend, overall_trend_change
from core.config import LeadScopeConfig
from core.types import (
    AggregateStats,
    AnalysisOptions,
    AnalysisReport,
    CategoryDefinition,
    ManufacturerConsolidation,
    Observation,
    RawQuoteRecord,
    TimeSeries,
)
from ingest.manufacturer_normalization import (
    ManufacturerNormalizer,
    load_manufacturer_normalizer,
    summarize_consolidation,
)
from ingest.pipeline import LeadTimeAnalysisRunner, load_category_tree, run_analysis
from store.report_export import write_analysis_report
from transforms.category_tree import CategoryTree, build_category_tree
from transforms.record_expansion import expand_record, expand_records

__all__ = [
    "AggregateStats",
    "AnalysisOptions",
    "AnalysisReport",
    "CategoryDefinition",
    "CategoryTree",
    "LeadScopeConfig",
    "LeadTimeAnalysisRunner",
    "ManufacturerConsolidation",
    "ManufacturerNormalizer",
    "Observation",
    "RawQuoteRecord",
    "TimeSeries",
    "aggregate",
    "aggregate_by_category",
    "aggregate_by_category_manufacturer",
    "aggregate_by_manufacturer",
    "aggregate_rolled_up",
    "aggregate_rolled_up_all",
    "build_category_tree",
    "build_rolled_up_time_series",
    "build_time_series",
    "expand_record",
    "expand_records",
    "group_observations",
    "load_category_tree",
    "load_manufacturer_normalizer",
    "manufacturers_by_category",
    "monthly_summaries",
    "overall_monthly_trend",
    "overall_trend_change",
    "present_stats",
    "rank",
    "rank_time_series",
    "round_presentation",
    "run_analysis",
    "series_totals",
    "summarize_consolidation",
    "write_analysis_report",
]
