"""Analysis orchestration.

This module coordinates source loading, manufacturer normalization,
record expansion, hierarchy construction, aggregation, ranking, and
optional report export for one analysis run.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from analysis.grouping import (
    aggregate_by_category,
    aggregate_by_category_manufacturer,
    aggregate_by_manufacturer,
    aggregate_rolled_up_all,
    build_time_series,
)
from analysis.ranking import rank_time_series
from analysis.trends import monthly_summaries, overall_monthly_trend, overall_trend_change
from core.config import LeadScopeConfig
from core.constants import DIMENSION_CATEGORY, DIMENSION_MANUFACTURER
from core.logging_config import get_logger
from core.types import (
    AnalysisOptions,
    AnalysisReport,
    ExpansionResult,
    ManufacturerConsolidation,
    RawQuoteRecord,
    RolledUpStats,
)
from ingest.input_reader import read_category_definitions, read_quote_records
from ingest.manufacturer_normalization import (
    ManufacturerNormalizer,
    load_manufacturer_normalizer,
    normalize_quote_records,
    summarize_consolidation,
)
from store.report_export import write_analysis_report
from transforms.category_tree import CategoryTree, build_category_tree
from transforms.record_expansion import expand_records

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class HierarchyContext:
    """Category tree outputs for downstream report stages."""

    rolled_up: Mapping[str, RolledUpStats]
    orphan_categories: tuple[str, ...]


class LeadTimeAnalysisRunner:
    """Runner for one lead-time analysis over an in-memory record set."""

    def __init__(self, options: AnalysisOptions, config: LeadScopeConfig) -> None:
        self._options = options
        self._config = config
        self._normalizer = self._load_normalizer()
        self._min_count = (
            options.min_data_points
            if options.min_data_points is not None
            else config.min_data_points
        )

    def run(self) -> AnalysisReport:
        """Execute the analysis and return its summary tables."""
        quote_records, consolidation = self._load_quote_records()
        expansion = expand_records(quote_records)
        hierarchy = self._load_hierarchy_context(expansion)
        report = self._build_report(expansion, hierarchy, consolidation)
        report = self._export_if_requested(report)
        _log_analysis_completion(self._options, report)
        return report

    def _load_normalizer(self) -> ManufacturerNormalizer:
        alias_path = self._options.aliases_path or self._config.aliases_path
        if alias_path is None:
            return ManufacturerNormalizer()
        return load_manufacturer_normalizer(alias_path)

    def _load_quote_records(self) -> tuple[list[RawQuoteRecord], ManufacturerConsolidation]:
        raw_records = read_quote_records(self._options.quotes_uri, self._config)
        normalized = normalize_quote_records(raw_records, self._normalizer)
        return normalized, summarize_consolidation(raw_records, normalized)

    def _load_hierarchy_context(self, expansion: ExpansionResult) -> HierarchyContext:
        if not self._options.categories_uri:
            return HierarchyContext(rolled_up=MappingProxyType({}), orphan_categories=())
        tree = load_category_tree(self._options.categories_uri, self._config)
        return HierarchyContext(
            rolled_up=aggregate_rolled_up_all(expansion.observations, tree),
            orphan_categories=tuple(orphan.category for orphan in tree.orphans),
        )

    def _build_report(
        self,
        expansion: ExpansionResult,
        hierarchy: HierarchyContext,
        consolidation: ManufacturerConsolidation,
    ) -> AnalysisReport:
        observations = expansion.observations
        category_series = build_time_series(observations, expansion.months, DIMENSION_CATEGORY)
        manufacturer_series = build_time_series(
            observations, expansion.months, DIMENSION_MANUFACTURER
        )
        overall_trend = overall_monthly_trend(category_series)
        return AnalysisReport(
            expansion=expansion,
            category_stats=aggregate_by_category(observations),
            manufacturer_stats=aggregate_by_manufacturer(observations),
            category_manufacturer_stats=aggregate_by_category_manufacturer(observations),
            rolled_up=hierarchy.rolled_up,
            category_series=category_series,
            manufacturer_series=manufacturer_series,
            monthly_summaries=monthly_summaries(observations, expansion.months),
            overall_trend=overall_trend,
            trend_change=overall_trend_change(overall_trend),
            top_categories=rank_time_series(category_series, self._min_count),
            top_manufacturers=rank_time_series(manufacturer_series, self._min_count),
            orphan_categories=hierarchy.orphan_categories,
            normalization_collisions=self._normalizer.collisions,
            manufacturer_consolidation=consolidation,
        )

    def _export_if_requested(self, report: AnalysisReport) -> AnalysisReport:
        if not self._options.output_dir:
            return report
        manifest_path = write_analysis_report(report, Path(self._options.output_dir))
        return replace(report, manifest_path=manifest_path)


def run_analysis(options: AnalysisOptions, config: LeadScopeConfig) -> AnalysisReport:
    """Run a lead-time analysis.

    Args:
        options: Analysis request options.
        config: Runtime configuration.

    Returns:
        Completed analysis report.

    Raises:
        LeadScopeIngestError: If quote or category sources cannot be read.
        HierarchyCycleError: If category paths describe a loop.
        LeadScopeExportError: If report files cannot be written.
    """
    runner = LeadTimeAnalysisRunner(options, config)
    return runner.run()


def load_category_tree(categories_uri: str, config: LeadScopeConfig) -> CategoryTree:
    """Read category definitions and build the category tree.

    Args:
        categories_uri: Category definitions CSV, directory, or S3 URI.
        config: Runtime configuration with delimiter and strictness.

    Returns:
        Fully built category tree.

    Raises:
        LeadScopeIngestError: If definitions cannot be read.
        HierarchyCycleError: If category paths describe a loop.
        OrphanCategoryError: If strict hierarchy mode finds an undefined parent.
    """
    definitions = read_category_definitions(categories_uri, config)
    return build_category_tree(
        definitions,
        delimiter=config.path_delimiter,
        strict=config.strict_hierarchy,
    )


def _log_analysis_completion(options: AnalysisOptions, report: AnalysisReport) -> None:
    """Log analysis completion with contextual metadata."""
    _LOGGER.info(
        "analysis_completed",
        quotes_uri=options.quotes_uri,
        categories_uri=options.categories_uri,
        records_seen=report.expansion.records_seen,
        records_dropped=report.expansion.records_dropped,
        observation_count=len(report.expansion.observations),
        month_count=len(report.expansion.months),
        category_count=len(report.category_stats),
        manufacturer_count=len(report.manufacturer_stats),
        orphan_count=len(report.orphan_categories),
        manifest_path=str(report.manifest_path) if report.manifest_path else None,
    )
