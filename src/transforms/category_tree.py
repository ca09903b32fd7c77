"""Category hierarchy construction.

This module builds an immutable forest of component types from flat
definitions whose tree paths list ancestors most-general first, and
computes every node's transitive descendant set once per build.
Rollup aggregation depends on a fully built tree, so construction either
completes for all nodes or raises.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from core.constants import DEFAULT_PATH_DELIMITER
from core.errors import HierarchyCycleError, OrphanCategoryError, UnknownCategoryError
from core.logging_config import get_logger
from core.types import CategoryDefinition, CategoryNode

_LOGGER = get_logger(__name__)


class CategoryTree:
    """Read-only category forest with precomputed descendant closures."""

    def __init__(
        self,
        nodes: Mapping[str, CategoryNode],
        orphans: tuple[OrphanCategoryError, ...] = (),
        duplicates: tuple[str, ...] = (),
    ) -> None:
        self._nodes = MappingProxyType(dict(nodes))
        self._orphans = orphans
        self._duplicates = duplicates

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def orphans(self) -> tuple[OrphanCategoryError, ...]:
        """Diagnostics for categories whose declared parent is undefined."""
        return self._orphans

    @property
    def duplicates(self) -> tuple[str, ...]:
        """Names defined more than once; the first definition was kept."""
        return self._duplicates

    def node(self, name: str) -> CategoryNode:
        """Return the built node for a category.

        Raises:
            UnknownCategoryError: If the category was never defined.
        """
        try:
            return self._nodes[name]
        except KeyError as error:
            raise UnknownCategoryError(
                f"Unknown category '{name}'. Check the category definitions source."
            ) from error

    def names(self) -> tuple[str, ...]:
        """Return all category names in sorted order."""
        return tuple(sorted(self._nodes))

    def roots(self) -> tuple[str, ...]:
        """Return categories without a parent, including orphans."""
        return tuple(sorted(name for name, node in self._nodes.items() if node.parent is None))

    def children(self, name: str) -> frozenset[str]:
        """Return direct children of a category."""
        return self.node(name).children

    def descendants(self, name: str) -> frozenset[str]:
        """Return every category below ``name``, excluding itself."""
        return self.node(name).descendants

    def parent(self, name: str) -> str | None:
        """Return the resolved parent, or None for roots and orphans."""
        return self.node(name).parent

    def ancestors(self, name: str) -> tuple[str, ...]:
        """Return the tree path ancestors of ``name``, most general first."""
        return self.node(name).tree_path[:-1]


def build_category_tree(
    definitions: Iterable[CategoryDefinition],
    delimiter: str = DEFAULT_PATH_DELIMITER,
    strict: bool = False,
) -> CategoryTree:
    """Build a category tree from flat definitions.

    Args:
        definitions: Category rows with delimited tree paths.
        delimiter: Separator between tree path segments.
        strict: Raise on the first orphaned category instead of recording it.

    Returns:
        Fully built tree.

    Raises:
        HierarchyCycleError: If the tree paths describe a loop.
        OrphanCategoryError: If ``strict`` and a parent is undefined.
    """
    paths: dict[str, tuple[str, ...]] = {}
    levels: dict[str, int] = {}
    duplicates: list[str] = []
    for definition in definitions:
        name = definition.name.strip()
        if name in paths:
            duplicates.append(name)
            continue
        paths[name] = split_tree_path(definition.tree_path, delimiter, name)
        levels[name] = definition.level
    parents, orphans = _resolve_parents(paths, strict)
    children = _link_children(paths, parents)
    descendants = _compute_descendant_closure(children)
    nodes = {
        name: CategoryNode(
            name=name,
            level=levels[name],
            tree_path=paths[name],
            parent=parents[name],
            children=frozenset(children[name]),
            descendants=descendants[name],
        )
        for name in paths
    }
    _log_tree_diagnostics(nodes, orphans, duplicates)
    return CategoryTree(nodes, orphans=orphans, duplicates=tuple(duplicates))


def split_tree_path(tree_path: str, delimiter: str, name: str) -> tuple[str, ...]:
    """Split a delimited tree path into trimmed segments.

    Args:
        tree_path: Delimited ancestor chain.
        delimiter: Segment separator; surrounding whitespace is optional.
        name: Category name used when the path is blank.

    Returns:
        Non-empty tuple of path segments.
    """
    separator = delimiter.strip() or delimiter
    segments = tuple(
        segment.strip() for segment in tree_path.split(separator) if segment.strip()
    )
    return segments or (name,)


def _resolve_parents(
    paths: Mapping[str, tuple[str, ...]],
    strict: bool,
) -> tuple[dict[str, str | None], tuple[OrphanCategoryError, ...]]:
    """Resolve each node's parent from the second-to-last path segment."""
    parents: dict[str, str | None] = {}
    orphans: list[OrphanCategoryError] = []
    for name, segments in paths.items():
        if len(segments) < 2:
            parents[name] = None
            continue
        declared_parent = segments[-2]
        if declared_parent in paths:
            parents[name] = declared_parent
            continue
        orphan = OrphanCategoryError(name, declared_parent)
        if strict:
            raise orphan
        orphans.append(orphan)
        parents[name] = None
    return parents, tuple(orphans)


def _link_children(
    paths: Mapping[str, tuple[str, ...]],
    parents: Mapping[str, str | None],
) -> dict[str, set[str]]:
    """Register every node as a child of its resolved parent."""
    children: dict[str, set[str]] = {name: set() for name in paths}
    for name, parent in parents.items():
        if parent is not None:
            children[parent].add(name)
    return children


def _compute_descendant_closure(
    children: Mapping[str, set[str]],
) -> dict[str, frozenset[str]]:
    """Compute transitive descendants with an explicit stack.

    Each node is closed once; closed nodes are reused by every ancestor
    that reaches them. A child found on the current path is a cycle.

    Raises:
        HierarchyCycleError: If a node is reachable from itself.
    """
    closed: dict[str, frozenset[str]] = {}
    for start in sorted(children):
        if start in closed:
            continue
        path = [start]
        on_path = {start}
        pending = [iter(sorted(children[start]))]
        while pending:
            child = next(pending[-1], None)
            if child is None:
                pending.pop()
                finished = path.pop()
                on_path.discard(finished)
                closed[finished] = _union_children(finished, children, closed)
                continue
            if child in on_path:
                cycle_start = path.index(child)
                raise HierarchyCycleError(tuple(path[cycle_start:]) + (child,))
            if child in closed:
                continue
            path.append(child)
            on_path.add(child)
            pending.append(iter(sorted(children[child])))
    return closed


def _union_children(
    name: str,
    children: Mapping[str, set[str]],
    closed: Mapping[str, frozenset[str]],
) -> frozenset[str]:
    """Union of a node's children and their already-closed descendants."""
    members: set[str] = set()
    for child in children[name]:
        members.add(child)
        members.update(closed[child])
    return frozenset(members)


def _log_tree_diagnostics(
    nodes: Mapping[str, CategoryNode],
    orphans: tuple[OrphanCategoryError, ...],
    duplicates: list[str],
) -> None:
    """Log data-quality warnings and the build summary."""
    for orphan in orphans:
        _LOGGER.warning("orphan_category", category=orphan.category, parent=orphan.parent)
    if duplicates:
        _LOGGER.warning("duplicate_category_definitions", categories=sorted(set(duplicates)))
    _LOGGER.info(
        "category_tree_built",
        node_count=len(nodes),
        root_count=sum(1 for node in nodes.values() if node.parent is None),
        orphan_count=len(orphans),
        duplicate_count=len(duplicates),
    )
