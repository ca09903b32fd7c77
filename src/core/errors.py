"""LeadScope exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class LeadScopeError(Exception):
    """Base exception for all LeadScope failures."""


class LeadScopeConfigError(LeadScopeError):
    """Raised for invalid runtime configuration."""


class LeadScopeIngestError(LeadScopeError):
    """Raised for source parsing and ingest failures."""


class RecordParseError(LeadScopeIngestError):
    """Raised when one quote record cannot be expanded.

    Row-level: the record contributes no observations and the
    expansion loop continues with the next record.
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class LeadScopeHierarchyError(LeadScopeError):
    """Raised for category hierarchy construction and lookup failures."""


class HierarchyCycleError(LeadScopeHierarchyError):
    """Raised when category paths describe a loop."""

    def __init__(self, cycle: tuple[str, ...]) -> None:
        chain = " -> ".join(cycle)
        super().__init__(
            f"Category hierarchy contains a cycle: {chain}. "
            "Fix the tree_path values so every category has a single acyclic ancestor chain."
        )
        self.cycle = cycle


class OrphanCategoryError(LeadScopeHierarchyError):
    """Raised (strict mode) or recorded when a declared parent is undefined."""

    def __init__(self, category: str, parent: str) -> None:
        super().__init__(
            f"Category '{category}' declares parent '{parent}', "
            "which is not among the category definitions. "
            "Add the parent definition or correct the tree_path."
        )
        self.category = category
        self.parent = parent


class UnknownCategoryError(LeadScopeHierarchyError):
    """Raised when looking up a category that was never defined."""


class LeadScopeAggregationError(LeadScopeError):
    """Raised for statistical aggregation failures."""


class EmptyAggregationError(LeadScopeAggregationError):
    """Raised when aggregating an empty observation set."""


class LeadScopeDependencyError(LeadScopeError):
    """Raised when an optional runtime dependency is missing."""


class LeadScopeExportError(LeadScopeError):
    """Raised when analysis reports cannot be written."""
