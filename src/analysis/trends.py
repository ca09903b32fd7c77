"""Overall monthly lead-time trends.

This module combines per-category monthly aggregates into one weighted
trend line and summarizes each month across all categories.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from analysis.summary_stats import aggregate
from core.constants import TREND_DECREASING, TREND_FLAT, TREND_INCREASING
from core.types import MonthlySummary, Observation, TimeSeries, TrendChange


def overall_monthly_trend(category_series: TimeSeries) -> Mapping[str, float | None]:
    """Weight each category's monthly mean by its observation count.

    The value for a month is ``sum(mean_i * count_i) / sum(count_i)`` over
    categories with data that month, which equals the mean of all raw
    observations of the month because every observation has exactly one
    category.

    Args:
        category_series: Per-category monthly statistics.

    Returns:
        Month -> weighted mean lead time, None for months without data.
    """
    trend: dict[str, float | None] = {}
    for month in category_series.months:
        weighted_sum = 0.0
        total_count = 0
        for monthly_stats in category_series.series.values():
            stats = monthly_stats.get(month)
            if stats is None:
                continue
            weighted_sum += stats.mean * stats.count
            total_count += stats.count
        trend[month] = weighted_sum / total_count if total_count else None
    return MappingProxyType(trend)


def monthly_summaries(
    observations: Iterable[Observation],
    months: Sequence[str],
) -> Mapping[str, MonthlySummary]:
    """Summarize every month that has observations.

    Args:
        observations: Expanded observations.
        months: Month keys to consider, in order.

    Returns:
        Month -> summary; months without observations are omitted.
    """
    by_month: dict[str, list[Observation]] = {}
    for observation in observations:
        by_month.setdefault(observation.month, []).append(observation)
    summaries: dict[str, MonthlySummary] = {}
    for month in months:
        rows = by_month.get(month)
        if not rows:
            continue
        stats = aggregate(rows)
        summaries[month] = MonthlySummary(
            month=month,
            observation_count=stats.count,
            unique_categories=stats.distinct_categories,
            unique_manufacturers=stats.distinct_manufacturers,
            stats=stats,
        )
    return MappingProxyType(summaries)


def overall_trend_change(trend: Mapping[str, float | None]) -> TrendChange | None:
    """Compare the first and last months that have data.

    Returns:
        Trend change, or None when fewer than two months have data.
    """
    points = [(month, value) for month, value in sorted(trend.items()) if value is not None]
    if len(points) < 2:
        return None
    (first_month, first_value), (last_month, last_value) = points[0], points[-1]
    delta = last_value - first_value
    if delta > 0:
        direction = TREND_INCREASING
    elif delta < 0:
        direction = TREND_DECREASING
    else:
        direction = TREND_FLAT
    return TrendChange(
        first_month=first_month,
        last_month=last_month,
        first_value=first_value,
        last_value=last_value,
        delta=delta,
        direction=direction,
    )
