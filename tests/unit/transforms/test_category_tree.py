"""Unit tests for category tree construction."""

from __future__ import annotations

import pytest

from core.errors import HierarchyCycleError, OrphanCategoryError, UnknownCategoryError
from core.types import CategoryDefinition
from transforms.category_tree import build_category_tree, split_tree_path


def _hvac_definitions() -> list[CategoryDefinition]:
    return [
        CategoryDefinition(name="HVAC", level=1, tree_path="HVAC"),
        CategoryDefinition(name="Fan", level=2, tree_path="HVAC > Fan"),
        CategoryDefinition(
            name="Centrifugal Fan", level=3, tree_path="HVAC > Fan > Centrifugal Fan"
        ),
        CategoryDefinition(name="Chiller", level=2, tree_path="HVAC > Chiller"),
    ]


def test_build_category_tree_links_parents_and_children() -> None:
    """Parents should come from the second-to-last path segment."""
    tree = build_category_tree(_hvac_definitions())

    assert tree.parent("Fan") == "HVAC"
    assert tree.parent("HVAC") is None
    assert tree.children("HVAC") == frozenset({"Fan", "Chiller"})
    assert tree.roots() == ("HVAC",)


def test_build_category_tree_computes_transitive_descendants() -> None:
    """Descendants should include grandchildren but never the node itself."""
    tree = build_category_tree(_hvac_definitions())

    assert tree.descendants("HVAC") == frozenset({"Fan", "Centrifugal Fan", "Chiller"})
    assert tree.descendants("Fan") == frozenset({"Centrifugal Fan"})
    assert tree.descendants("Centrifugal Fan") == frozenset()
    assert "HVAC" not in tree.descendants("HVAC")


def test_build_category_tree_ancestors_follow_tree_path() -> None:
    """Ancestors should be listed most general first."""
    tree = build_category_tree(_hvac_definitions())

    assert tree.ancestors("Centrifugal Fan") == ("HVAC", "Fan")


def test_build_category_tree_raises_on_cycle() -> None:
    """Mutually parented categories should fail the whole build."""
    definitions = [
        CategoryDefinition(name="A", level=1, tree_path="B > A"),
        CategoryDefinition(name="B", level=1, tree_path="A > B"),
    ]

    with pytest.raises(HierarchyCycleError) as error_info:
        build_category_tree(definitions)

    assert error_info.value.cycle == ("A", "B", "A")


def test_build_category_tree_keeps_orphans_as_roots() -> None:
    """Undefined parents should leave the category as a reported root."""
    definitions = _hvac_definitions() + [
        CategoryDefinition(name="Valve", level=2, tree_path="Plumbing > Valve"),
    ]

    tree = build_category_tree(definitions)

    assert tree.parent("Valve") is None
    assert "Valve" in tree.roots()
    assert [(orphan.category, orphan.parent) for orphan in tree.orphans] == [
        ("Valve", "Plumbing")
    ]


def test_build_category_tree_strict_mode_raises_on_orphan() -> None:
    """Strict mode should reject undefined parents."""
    definitions = [CategoryDefinition(name="Valve", level=2, tree_path="Plumbing > Valve")]

    with pytest.raises(OrphanCategoryError):
        build_category_tree(definitions, strict=True)


def test_build_category_tree_keeps_first_duplicate_definition() -> None:
    """Later definitions of the same name should be ignored and reported."""
    definitions = _hvac_definitions() + [
        CategoryDefinition(name="Fan", level=1, tree_path="Fan"),
    ]

    tree = build_category_tree(definitions)

    assert tree.parent("Fan") == "HVAC"
    assert tree.duplicates == ("Fan",)


def test_tree_node_raises_for_unknown_category() -> None:
    """Looking up an undefined category should raise a hierarchy error."""
    tree = build_category_tree(_hvac_definitions())

    with pytest.raises(UnknownCategoryError):
        tree.node("Boiler")


def test_split_tree_path_tolerates_spacing_and_blank_paths() -> None:
    """Segments should be trimmed and blank paths fall back to the name."""
    assert split_tree_path("HVAC>Fan >  Inline Fan", " > ", "Inline Fan") == (
        "HVAC",
        "Fan",
        "Inline Fan",
    )
    assert split_tree_path("", " > ", "Pump") == ("Pump",)


def test_build_category_tree_handles_deep_chains_without_recursion() -> None:
    """A chain deeper than the interpreter recursion limit should still close."""
    depth = 3000
    names = [f"C{index}" for index in range(depth)]
    definitions = [
        CategoryDefinition(name=name, level=index + 1, tree_path=" > ".join(names[: index + 1]))
        for index, name in enumerate(names)
    ]

    tree = build_category_tree(definitions)

    assert len(tree.descendants("C0")) == depth - 1
    assert tree.descendants(names[-1]) == frozenset()
    assert tree.parent(names[-1]) == names[-2]


def test_build_category_tree_reports_three_node_cycle_beside_valid_root() -> None:
    """A cycle should be reported even when other categories are well formed."""
    definitions = [
        CategoryDefinition(name="Root", level=1, tree_path="Root"),
        CategoryDefinition(name="A", level=2, tree_path="C > A"),
        CategoryDefinition(name="B", level=2, tree_path="A > B"),
        CategoryDefinition(name="C", level=2, tree_path="B > C"),
    ]

    with pytest.raises(HierarchyCycleError) as error_info:
        build_category_tree(definitions)

    assert error_info.value.cycle == ("A", "B", "C", "A")


def test_build_category_tree_rejects_self_parent() -> None:
    """A category naming itself as parent is a one-node cycle."""
    definitions = [CategoryDefinition(name="A", level=2, tree_path="A > A")]

    with pytest.raises(HierarchyCycleError) as error_info:
        build_category_tree(definitions)

    assert error_info.value.cycle == ("A", "A")
