"""Unit tests for grouped and rolled-up aggregation."""

from __future__ import annotations

import pytest

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
from core.errors import LeadScopeAggregationError
from core.types import CategoryDefinition, Observation
from transforms.category_tree import build_category_tree


def _observation(
    category: str,
    lead_time: float,
    month: str = "2024-01",
    manufacturer: str = "Greenheck",
) -> Observation:
    return Observation(
        month=month,
        category=category,
        manufacturer=manufacturer,
        lead_time_weeks=lead_time,
        cost=0.0,
        component_count=1,
        project_name="Alpha",
        source_record_id=f"{category}:{month}:{lead_time}",
    )


def _tree():
    return build_category_tree(
        [
            CategoryDefinition(name="HVAC", level=1, tree_path="HVAC"),
            CategoryDefinition(name="Fan", level=2, tree_path="HVAC > Fan"),
            CategoryDefinition(
                name="Centrifugal Fan", level=3, tree_path="HVAC > Fan > Centrifugal Fan"
            ),
            CategoryDefinition(name="Chiller", level=2, tree_path="HVAC > Chiller"),
        ]
    )


def _observations() -> list[Observation]:
    return [
        _observation("Fan", 4.0),
        _observation("Fan", 6.0),
        _observation("Centrifugal Fan", 12.0, month="2024-03"),
        _observation("Chiller", 10.0, month="2024-02", manufacturer="Trane"),
    ]


def test_group_observations_rejects_unknown_dimension() -> None:
    """Only category and manufacturer are valid grouping keys."""
    with pytest.raises(LeadScopeAggregationError):
        group_observations(_observations(), "project_name")


def test_aggregate_by_category_uses_direct_observations_only() -> None:
    """Per-category stats should not include descendants."""
    stats = aggregate_by_category(_observations())

    assert list(stats) == ["Centrifugal Fan", "Chiller", "Fan"]
    assert stats["Fan"].count == 2
    assert stats["Fan"].mean == 5.0
    assert stats["Fan"].median == 5.0


def test_aggregate_by_manufacturer_groups_by_canonical_name() -> None:
    """Manufacturer stats should be keyed by the observation manufacturer."""
    stats = aggregate_by_manufacturer(_observations())

    assert stats["Greenheck"].count == 3
    assert stats["Trane"].count == 1


def test_aggregate_rolled_up_includes_descendants() -> None:
    """Rollup count should equal direct plus descendant observations."""
    tree = _tree()
    by_category = group_observations(_observations(), "category")

    rolled_up = aggregate_rolled_up(by_category, tree, "Fan")

    assert rolled_up is not None
    assert rolled_up.direct_count == 2
    assert rolled_up.descendant_count == 1
    assert rolled_up.stats.count == rolled_up.total_count == 3
    assert rolled_up.stats.count >= aggregate_by_category(_observations())["Fan"].count


def test_aggregate_rolled_up_returns_none_without_data() -> None:
    """Categories with no direct or descendant data have no statistics."""
    tree = build_category_tree(
        [CategoryDefinition(name="Pump", level=1, tree_path="Pump")]
    )

    assert aggregate_rolled_up({}, tree, "Pump") is None


def test_aggregate_rolled_up_handles_category_missing_from_tree() -> None:
    """Unknown categories roll up to their own observations."""
    by_category = group_observations([_observation("Pump", 3.0)], "category")

    rolled_up = aggregate_rolled_up(by_category, _tree(), "Pump")

    assert rolled_up is not None
    assert rolled_up.level == 0
    assert rolled_up.tree_path == ("Pump",)
    assert rolled_up.stats.count == 1


def test_aggregate_rolled_up_all_orders_by_total_count() -> None:
    """Parents with the most data should appear first."""
    rolled_up = aggregate_rolled_up_all(_observations(), _tree())

    assert list(rolled_up) == ["HVAC", "Fan", "Centrifugal Fan", "Chiller"]
    assert rolled_up["HVAC"].direct_count == 0
    assert rolled_up["HVAC"].descendant_count == 4


def test_build_time_series_marks_missing_months_as_none() -> None:
    """Months without data for a key should be None, not zero."""
    months = ("2024-01", "2024-02", "2024-03")

    series = build_time_series(_observations(), months, "category")

    assert series.months == months
    assert series.series["Fan"]["2024-01"].count == 2
    assert series.series["Fan"]["2024-02"] is None
    assert series.series["Chiller"]["2024-02"].mean == 10.0


def test_build_rolled_up_time_series_rolls_each_month() -> None:
    """Monthly rollups should include descendant data of that month."""
    months = ("2024-01", "2024-02", "2024-03")

    series = build_rolled_up_time_series(_observations(), months, _tree())

    assert series.dimension == "category_rollup"
    assert series.series["HVAC"]["2024-03"].count == 1
    assert series.series["Fan"]["2024-02"] is None


def test_aggregate_by_category_manufacturer_keys_on_both_dimensions() -> None:
    """Pair statistics should only cover combinations that were quoted."""
    observations = _observations() + [_observation("Fan", 8.0, manufacturer="Trane")]

    stats = aggregate_by_category_manufacturer(observations)

    assert list(stats) == [
        ("Centrifugal Fan", "Greenheck"),
        ("Chiller", "Trane"),
        ("Fan", "Greenheck"),
        ("Fan", "Trane"),
    ]
    assert stats[("Fan", "Greenheck")].mean == 5.0
    assert stats[("Fan", "Trane")].count == 1
    assert ("Chiller", "Greenheck") not in stats


def test_manufacturers_by_category_orders_by_data_points() -> None:
    """Suppliers of a category should be listed with the most data first."""
    observations = _observations() + [_observation("Fan", 8.0, manufacturer="Acme")]

    suppliers = manufacturers_by_category(aggregate_by_category_manufacturer(observations))

    assert suppliers["Fan"] == ("Greenheck", "Acme")
    assert suppliers["Chiller"] == ("Trane",)


def test_aggregate_results_are_read_only() -> None:
    """Returned mappings should reject mutation by callers."""
    by_category = aggregate_by_category(_observations())
    rolled_up = aggregate_rolled_up_all(_observations(), _tree())

    with pytest.raises(TypeError):
        by_category["Fan"] = by_category["Chiller"]  # type: ignore[index]
    with pytest.raises(TypeError):
        del rolled_up["HVAC"]  # type: ignore[index]
