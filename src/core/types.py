"""Shared typed models.

This module defines immutable data models used by ingest, transforms,
analysis, and store layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True)
class RawQuoteRecord:
    """One quote row as delivered by the ingest layer.

    Attributes:
        record_id: Opaque source identifier, e.g. ``quotes.csv:7``.
        answer_date: Raw date text of the quote answer.
        lead_time_weeks: Raw numeric text of the quoted lead time.
        component_types: JSON-encoded list of component type names.
        manufacturers: JSON-encoded list of manufacturer names.
        cost: Raw numeric text of the quoted cost.
        component_count: Raw integer text of the component count.
        project_name: Project the quote belongs to.
        buyer_name: Requesting party.
        seller_name: Quoting party.
    """

    record_id: str
    answer_date: str
    lead_time_weeks: str
    component_types: str
    manufacturers: str
    cost: str = ""
    component_count: str = ""
    project_name: str = ""
    buyer_name: str = ""
    seller_name: str = ""


@dataclass(frozen=True)
class Observation:
    """Atomic (month, category, manufacturer, lead time) data point.

    Attributes:
        month: Month key in ``YYYY-MM`` form.
        category: Component type name.
        manufacturer: Canonical manufacturer name.
        lead_time_weeks: Finite non-negative lead time.
        cost: Non-negative quoted cost of the source record.
        component_count: Component count of the source record, at least 1.
        project_name: Project name of the source record.
        source_record_id: Identifier of the record this was expanded from.
    """

    month: str
    category: str
    manufacturer: str
    lead_time_weeks: float
    cost: float
    component_count: int
    project_name: str
    source_record_id: str


@dataclass(frozen=True)
class ExpansionResult:
    """Output of expanding a record batch into observations.

    Attributes:
        observations: All observations in input order.
        months: Sorted month keys present in ``observations``.
        records_seen: Number of input records.
        records_dropped: Records that produced no observations.
        drop_reasons: Dropped record count per reason code.
    """

    observations: tuple[Observation, ...]
    months: tuple[str, ...]
    records_seen: int
    records_dropped: int
    drop_reasons: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CategoryDefinition:
    """Flat category definition row.

    Attributes:
        name: Unique component type name.
        level: Declared depth in the hierarchy.
        tree_path: Delimited ancestor chain, most general first.
    """

    name: str
    level: int
    tree_path: str


@dataclass(frozen=True)
class CategoryNode:
    """Built category hierarchy node."""

    name: str
    level: int
    tree_path: tuple[str, ...]
    parent: str | None
    children: frozenset[str]
    descendants: frozenset[str]


@dataclass(frozen=True)
class AggregateStats:
    """Unrounded lead-time statistics for one observation set.

    Attributes:
        count: Number of observations.
        mean: Arithmetic mean lead time.
        median: Median lead time.
        minimum: Smallest lead time.
        maximum: Largest lead time.
        stddev_population: Population standard deviation of lead times.
        total_cost: Sum of observation costs.
        distinct_projects: Unique non-blank project names.
        distinct_categories: Unique categories.
        distinct_manufacturers: Unique manufacturers.
    """

    count: int
    mean: float
    median: float
    minimum: float
    maximum: float
    stddev_population: float
    total_cost: float
    distinct_projects: int
    distinct_categories: int
    distinct_manufacturers: int


@dataclass(frozen=True)
class RolledUpStats:
    """Statistics for a category plus all of its descendants.

    Attributes:
        category: Category name.
        level: Declared level, or 0 for categories absent from the tree.
        tree_path: Ancestor chain ending in the category.
        stats: Statistics over direct and descendant observations.
        direct_count: Observations tagged with the category itself.
        descendant_count: Observations tagged with any descendant.
    """

    category: str
    level: int
    tree_path: tuple[str, ...]
    stats: AggregateStats
    direct_count: int
    descendant_count: int

    @property
    def total_count(self) -> int:
        """Count of all rolled-up observations."""
        return self.direct_count + self.descendant_count


@dataclass(frozen=True)
class TimeSeries:
    """Per-key monthly statistics.

    Attributes:
        dimension: Grouping dimension name.
        months: Ordered month keys covered by the series.
        series: Key -> month -> statistics, ``None`` where there is no data.
    """

    dimension: str
    months: tuple[str, ...]
    series: Mapping[str, Mapping[str, AggregateStats | None]]


@dataclass(frozen=True)
class MonthlySummary:
    """Overall activity for one month across all categories."""

    month: str
    observation_count: int
    unique_categories: int
    unique_manufacturers: int
    stats: AggregateStats


@dataclass(frozen=True)
class TrendChange:
    """Change in overall lead time between first and last months with data."""

    first_month: str
    last_month: str
    first_value: float
    last_value: float
    delta: float
    direction: str


@dataclass(frozen=True)
class ManufacturerConsolidation:
    """Distinct manufacturer spellings before and after normalization."""

    distinct_before: int
    distinct_after: int

    @property
    def reduction(self) -> int:
        """Number of spellings merged into another canonical name or dropped."""
        return self.distinct_before - self.distinct_after


@dataclass(frozen=True)
class AnalysisOptions:
    """Analysis run options.

    Attributes:
        quotes_uri: Quote CSV file, directory, or S3 prefix.
        categories_uri: Optional category definition CSV or S3 object.
        aliases_path: Optional YAML manufacturer alias table.
        output_dir: Optional directory for JSON report tables.
        min_data_points: Optional override of configured ranking threshold.
    """

    quotes_uri: str
    categories_uri: str | None = None
    aliases_path: str | None = None
    output_dir: str | None = None
    min_data_points: int | None = None


@dataclass(frozen=True)
class AnalysisReport:
    """All summary tables produced by one analysis run."""

    expansion: ExpansionResult
    category_stats: Mapping[str, AggregateStats]
    manufacturer_stats: Mapping[str, AggregateStats]
    category_manufacturer_stats: Mapping[tuple[str, str], AggregateStats]
    rolled_up: Mapping[str, RolledUpStats]
    category_series: TimeSeries
    manufacturer_series: TimeSeries
    monthly_summaries: Mapping[str, MonthlySummary]
    overall_trend: Mapping[str, float | None]
    trend_change: TrendChange | None
    top_categories: tuple[str, ...]
    top_manufacturers: tuple[str, ...]
    orphan_categories: tuple[str, ...] = ()
    normalization_collisions: tuple[str, ...] = ()
    manufacturer_consolidation: ManufacturerConsolidation | None = None
    manifest_path: Path | None = None
