"""Lead-time summary statistics.

This module computes the base aggregate every grouping variant builds
on. Values stay unrounded; rounding is applied only when a row is
prepared for presentation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import statistics
from typing import Iterable

from core.constants import PRESENTATION_DECIMALS
from core.errors import EmptyAggregationError
from core.types import AggregateStats, Observation


def aggregate(observations: Iterable[Observation]) -> AggregateStats:
    """Summarize lead times and costs for an observation set.

    Args:
        observations: Observations to summarize.

    Returns:
        Unrounded statistics.

    Raises:
        EmptyAggregationError: If ``observations`` is empty.
    """
    rows = tuple(observations)
    if not rows:
        raise EmptyAggregationError(
            "Cannot aggregate an empty observation set: there is no data. "
            "Check for data before aggregating instead of treating it as zero."
        )
    lead_times = [row.lead_time_weeks for row in rows]
    return AggregateStats(
        count=len(rows),
        mean=statistics.fmean(lead_times),
        median=median(lead_times),
        minimum=min(lead_times),
        maximum=max(lead_times),
        stddev_population=statistics.pstdev(lead_times),
        total_cost=sum(row.cost for row in rows),
        distinct_projects=len({row.project_name for row in rows if row.project_name}),
        distinct_categories=len({row.category for row in rows}),
        distinct_manufacturers=len({row.manufacturer for row in rows}),
    )


def median(values: list[float]) -> float:
    """Return the median, averaging the two central values for even counts."""
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def round_presentation(value: float) -> float:
    """Round a lead-time figure half-up to one decimal place."""
    quantum = Decimal(1).scaleb(-PRESENTATION_DECIMALS)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def present_stats(stats: AggregateStats) -> dict[str, float | int]:
    """Build a presentation row from unrounded statistics.

    Mean, median, and standard deviation are rounded; extrema, cost, and
    counts are reported exactly.
    """
    return {
        "average_lead_time_weeks": round_presentation(stats.mean),
        "median_lead_time_weeks": round_presentation(stats.median),
        "min_lead_time_weeks": stats.minimum,
        "max_lead_time_weeks": stats.maximum,
        "std_dev_weeks": round_presentation(stats.stddev_population),
        "data_points": stats.count,
        "total_cost": stats.total_cost,
        "project_count": stats.distinct_projects,
        "component_type_count": stats.distinct_categories,
        "manufacturer_count": stats.distinct_manufacturers,
    }
