"""Grouped lead-time aggregation.

This module applies the base aggregate per category, per manufacturer,
per category rollup, and per month. Groups without data are absent or
``None``; they are never represented by zero-valued statistics.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from analysis.summary_stats import aggregate
from core.constants import (
    DIMENSION_CATEGORY,
    DIMENSION_CATEGORY_ROLLUP,
    DIMENSION_MANUFACTURER,
    SUPPORTED_GROUPING_DIMENSIONS,
)
from core.errors import LeadScopeAggregationError
from core.types import AggregateStats, Observation, RolledUpStats, TimeSeries
from transforms.category_tree import CategoryTree


def group_observations(
    observations: Iterable[Observation],
    dimension: str,
) -> dict[str, tuple[Observation, ...]]:
    """Group observations by category or manufacturer.

    Args:
        observations: Observations to group.
        dimension: ``"category"`` or ``"manufacturer"``.

    Returns:
        Key -> observations in input order, keys sorted.

    Raises:
        LeadScopeAggregationError: If the dimension is unsupported.
    """
    if dimension not in SUPPORTED_GROUPING_DIMENSIONS:
        raise LeadScopeAggregationError(
            f"Unsupported grouping dimension '{dimension}'. "
            f"Use one of {SUPPORTED_GROUPING_DIMENSIONS}."
        )
    groups: dict[str, list[Observation]] = {}
    for observation in observations:
        key = getattr(observation, dimension)
        groups.setdefault(key, []).append(observation)
    return {key: tuple(groups[key]) for key in sorted(groups)}


def aggregate_by_category(observations: Iterable[Observation]) -> Mapping[str, AggregateStats]:
    """Aggregate each category's direct observations independently."""
    return MappingProxyType(
        _aggregate_groups(group_observations(observations, DIMENSION_CATEGORY))
    )


def aggregate_by_manufacturer(
    observations: Iterable[Observation],
) -> Mapping[str, AggregateStats]:
    """Aggregate each manufacturer's observations independently."""
    return MappingProxyType(
        _aggregate_groups(group_observations(observations, DIMENSION_MANUFACTURER))
    )


def aggregate_by_category_manufacturer(
    observations: Iterable[Observation],
) -> Mapping[tuple[str, str], AggregateStats]:
    """Aggregate every category and manufacturer pair that has observations.

    Args:
        observations: Observations to group.

    Returns:
        ``(category, manufacturer)`` -> statistics, keys sorted.
    """
    pairs: dict[tuple[str, str], list[Observation]] = {}
    for observation in observations:
        pairs.setdefault((observation.category, observation.manufacturer), []).append(
            observation
        )
    return MappingProxyType({key: aggregate(pairs[key]) for key in sorted(pairs)})


def manufacturers_by_category(
    pair_stats: Mapping[tuple[str, str], AggregateStats],
) -> Mapping[str, tuple[str, ...]]:
    """List the manufacturers quoting each category.

    Args:
        pair_stats: Output of :func:`aggregate_by_category_manufacturer`.

    Returns:
        Category -> manufacturers ordered by observation count descending,
        then name.
    """
    counts: dict[str, list[tuple[int, str]]] = {}
    for (category, manufacturer), stats in pair_stats.items():
        counts.setdefault(category, []).append((-stats.count, manufacturer))
    return MappingProxyType(
        {
            category: tuple(manufacturer for _, manufacturer in sorted(counts[category]))
            for category in sorted(counts)
        }
    )


def aggregate_rolled_up(
    observations_by_category: Mapping[str, Sequence[Observation]],
    tree: CategoryTree,
    category: str,
) -> RolledUpStats | None:
    """Aggregate a category together with all of its descendants.

    Categories missing from the tree roll up to their own observations.

    Args:
        observations_by_category: Direct observations keyed by category.
        tree: Fully built category tree.
        category: Category to roll up.

    Returns:
        Rolled-up statistics, or None when neither the category nor any
        descendant has observations.
    """
    direct = tuple(observations_by_category.get(category, ()))
    if category in tree:
        node = tree.node(category)
        descendants = sorted(node.descendants)
        level, tree_path = node.level, node.tree_path
    else:
        descendants, level, tree_path = [], 0, (category,)
    from_descendants = tuple(
        observation
        for descendant in descendants
        for observation in observations_by_category.get(descendant, ())
    )
    if not direct and not from_descendants:
        return None
    return RolledUpStats(
        category=category,
        level=level,
        tree_path=tree_path,
        stats=aggregate(direct + from_descendants),
        direct_count=len(direct),
        descendant_count=len(from_descendants),
    )


def aggregate_rolled_up_all(
    observations: Iterable[Observation],
    tree: CategoryTree,
) -> Mapping[str, RolledUpStats]:
    """Roll up every tree category that has data.

    Returns:
        Category -> rolled-up statistics ordered by total count descending,
        then name.
    """
    by_category = group_observations(observations, DIMENSION_CATEGORY)
    results: list[RolledUpStats] = []
    for category in tree.names():
        rolled_up = aggregate_rolled_up(by_category, tree, category)
        if rolled_up is not None:
            results.append(rolled_up)
    results.sort(key=lambda item: (-item.total_count, item.category))
    return MappingProxyType({item.category: item for item in results})


def build_time_series(
    observations: Iterable[Observation],
    months: Sequence[str],
    dimension: str,
) -> TimeSeries:
    """Build per-key monthly statistics for a grouping dimension.

    Args:
        observations: Observations to slice.
        months: Month keys to cover, usually ``ExpansionResult.months``.
        dimension: ``"category"`` or ``"manufacturer"``.

    Returns:
        Time series with ``None`` for months where a key has no data.
    """
    by_month = _group_by_month(observations)
    series: dict[str, dict[str, AggregateStats | None]] = {}
    for month in months:
        monthly_stats = _aggregate_groups(group_observations(by_month.get(month, ()), dimension))
        for key, stats in monthly_stats.items():
            series.setdefault(key, {})[month] = stats
    return _freeze_series(dimension, months, series)


def build_rolled_up_time_series(
    observations: Iterable[Observation],
    months: Sequence[str],
    tree: CategoryTree,
) -> TimeSeries:
    """Build monthly rolled-up statistics for every tree category."""
    by_month = _group_by_month(observations)
    series: dict[str, dict[str, AggregateStats | None]] = {}
    for month in months:
        by_category = group_observations(by_month.get(month, ()), DIMENSION_CATEGORY)
        for category in tree.names():
            rolled_up = aggregate_rolled_up(by_category, tree, category)
            if rolled_up is not None:
                series.setdefault(category, {})[month] = rolled_up.stats
    return _freeze_series(DIMENSION_CATEGORY_ROLLUP, months, series)


def _aggregate_groups(groups: Mapping[str, Sequence[Observation]]) -> dict[str, AggregateStats]:
    """Aggregate non-empty groups, preserving key order."""
    return {key: aggregate(rows) for key, rows in groups.items() if rows}


def _group_by_month(observations: Iterable[Observation]) -> dict[str, list[Observation]]:
    """Index observations by month key."""
    by_month: dict[str, list[Observation]] = {}
    for observation in observations:
        by_month.setdefault(observation.month, []).append(observation)
    return by_month


def _freeze_series(
    dimension: str,
    months: Sequence[str],
    series: Mapping[str, Mapping[str, AggregateStats | None]],
) -> TimeSeries:
    """Fill absent months with None and wrap mappings read-only."""
    ordered_months = tuple(months)
    frozen = {
        key: MappingProxyType({month: series[key].get(month) for month in ordered_months})
        for key in sorted(series)
    }
    return TimeSeries(
        dimension=dimension,
        months=ordered_months,
        series=MappingProxyType(frozen),
    )
