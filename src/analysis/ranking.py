"""Ranking and filtering by data sufficiency."""

from __future__ import annotations

from typing import Mapping

from core.types import TimeSeries


def rank(
    grouped_totals: Mapping[str, int],
    min_count: int,
    limit: int | None = None,
) -> tuple[str, ...]:
    """Rank keys by observation count.

    Args:
        grouped_totals: Key -> total observation count.
        min_count: Keys with a total strictly below this are excluded.
        limit: Optional maximum number of keys to return.

    Returns:
        Keys ordered by count descending, ties by key ascending.
    """
    eligible = [(key, total) for key, total in grouped_totals.items() if total >= min_count]
    eligible.sort(key=lambda item: (-item[1], item[0]))
    ranked = tuple(key for key, _ in eligible)
    return ranked if limit is None else ranked[:limit]


def series_totals(time_series: TimeSeries) -> dict[str, int]:
    """Sum observation counts across all months for each key."""
    return {
        key: sum(stats.count for stats in monthly_stats.values() if stats is not None)
        for key, monthly_stats in time_series.series.items()
    }


def rank_time_series(
    time_series: TimeSeries,
    min_count: int,
    limit: int | None = None,
) -> tuple[str, ...]:
    """Rank the keys of a monthly series by their total observation count."""
    return rank(series_totals(time_series), min_count, limit)
