"""LeadScope CLI entry points.
This module exposes analysis, trend, ranking, supplier, and hierarchy commands.
It maps argparse commands onto the pipeline and analysis functions.
"""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from analysis.grouping import manufacturers_by_category
from analysis.summary_stats import round_presentation
from core.config import LeadScopeConfig
from core.constants import DIMENSION_CATEGORY, DIMENSION_MANUFACTURER
from core.types import AnalysisOptions
from ingest.pipeline import load_category_tree, run_analysis


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="leadscope", description="LeadScope lead-time CLI")
    parser.add_argument(
        "--aliases",
        help="Override LEADSCOPE_MANUFACTURER_ALIASES for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_analyze_command(subparsers)
    _add_trends_command(subparsers)
    _add_top_command(subparsers)
    _add_suppliers_command(subparsers)
    _add_hierarchy_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the LeadScope CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = LeadScopeConfig.from_env()
    if args.command == "analyze":
        return _run_analyze_command(config, args)
    if args.command == "trends":
        return _run_trends_command(config, args)
    if args.command == "top":
        return _run_top_command(config, args)
    if args.command == "suppliers":
        return _run_suppliers_command(config, args)
    if args.command == "hierarchy":
        return _run_hierarchy_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_analyze_command(config: LeadScopeConfig, args: argparse.Namespace) -> int:
    """Handle analyze command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = AnalysisOptions(
        quotes_uri=args.quotes,
        categories_uri=args.categories,
        aliases_path=args.aliases,
        output_dir=args.output_dir,
        min_data_points=args.min_data_points,
    )
    report = run_analysis(options, config)
    if report.manifest_path is not None:
        print(report.manifest_path)
        return 0
    expansion = report.expansion
    print(f"records={expansion.records_seen}")
    print(f"dropped={expansion.records_dropped}")
    print(f"observations={len(expansion.observations)}")
    print(f"months={len(expansion.months)}")
    print(f"categories={len(report.category_stats)}")
    print(f"manufacturers={len(report.manufacturer_stats)}")
    return 0


def _run_trends_command(config: LeadScopeConfig, args: argparse.Namespace) -> int:
    """Handle trends command.

    Prints one ``month<TAB>average<TAB>count`` line per month; months
    without data print ``-`` as the average.
    """
    options = AnalysisOptions(quotes_uri=args.quotes, aliases_path=args.aliases)
    report = run_analysis(options, config)
    for month in report.expansion.months:
        value = report.overall_trend.get(month)
        summary = report.monthly_summaries.get(month)
        count = summary.observation_count if summary is not None else 0
        rendered = f"{round_presentation(value):.1f}" if value is not None else "-"
        print(f"{month}\t{rendered}\t{count}")
    return 0


def _run_top_command(config: LeadScopeConfig, args: argparse.Namespace) -> int:
    """Handle top command."""
    options = AnalysisOptions(
        quotes_uri=args.quotes,
        aliases_path=args.aliases,
        min_data_points=args.min_data_points,
    )
    report = run_analysis(options, config)
    if args.dimension == DIMENSION_CATEGORY:
        ranked, stats_by_key = report.top_categories, report.category_stats
    else:
        ranked, stats_by_key = report.top_manufacturers, report.manufacturer_stats
    limit = args.limit if args.limit is not None else len(ranked)
    for key in ranked[:limit]:
        stats = stats_by_key[key]
        print(f"{key}\t{stats.count}\t{round_presentation(stats.mean):.1f}")
    return 0


def _run_suppliers_command(config: LeadScopeConfig, args: argparse.Namespace) -> int:
    """Handle suppliers command.

    Prints one ``manufacturer<TAB>count<TAB>average`` line per manufacturer
    quoting the category, most data first.
    """
    options = AnalysisOptions(quotes_uri=args.quotes, aliases_path=args.aliases)
    report = run_analysis(options, config)
    pair_stats = report.category_manufacturer_stats
    for manufacturer in manufacturers_by_category(pair_stats).get(args.category, ()):
        stats = pair_stats[(args.category, manufacturer)]
        print(f"{manufacturer}\t{stats.count}\t{round_presentation(stats.mean):.1f}")
    return 0


def _run_hierarchy_command(config: LeadScopeConfig, args: argparse.Namespace) -> int:
    """Handle hierarchy command."""
    tree = load_category_tree(args.categories, config)
    node = tree.node(args.category)
    print(f"category={node.name}")
    print(f"level={node.level}")
    print(f"parent={node.parent or '-'}")
    print(f"ancestors={' > '.join(tree.ancestors(node.name)) or '-'}")
    print(f"children={', '.join(sorted(node.children)) or '-'}")
    print(f"descendants={', '.join(sorted(node.descendants)) or '-'}")
    return 0


def _add_analyze_command(subparsers: Any) -> None:
    """Register analyze subcommand."""
    parser = subparsers.add_parser("analyze", help="Run a full lead-time analysis")
    parser.add_argument("quotes", help="Quote CSV file, directory, or s3://bucket/prefix")
    parser.add_argument("--categories", help="Optional category definitions CSV")
    parser.add_argument("--output-dir", help="Optional directory for JSON report tables")
    parser.add_argument(
        "--min-data-points",
        type=int,
        help="Override LEADSCOPE_MIN_DATA_POINTS for ranked lists",
    )


def _add_trends_command(subparsers: Any) -> None:
    """Register trends subcommand."""
    parser = subparsers.add_parser("trends", help="Print the overall monthly lead-time trend")
    parser.add_argument("quotes", help="Quote CSV file, directory, or s3://bucket/prefix")


def _add_top_command(subparsers: Any) -> None:
    """Register top subcommand."""
    parser = subparsers.add_parser("top", help="Rank categories or manufacturers by data points")
    parser.add_argument("quotes", help="Quote CSV file, directory, or s3://bucket/prefix")
    parser.add_argument(
        "--dimension",
        default=DIMENSION_CATEGORY,
        choices=(DIMENSION_CATEGORY, DIMENSION_MANUFACTURER),
        help="Grouping dimension to rank",
    )
    parser.add_argument(
        "--min-data-points",
        type=int,
        help="Override LEADSCOPE_MIN_DATA_POINTS",
    )
    parser.add_argument("--limit", type=int, help="Maximum number of keys to print")


def _add_suppliers_command(subparsers: Any) -> None:
    """Register suppliers subcommand."""
    parser = subparsers.add_parser("suppliers", help="List manufacturers quoting a category")
    parser.add_argument("quotes", help="Quote CSV file, directory, or s3://bucket/prefix")
    parser.add_argument("--category", required=True, help="Category name to inspect")


def _add_hierarchy_command(subparsers: Any) -> None:
    """Register hierarchy subcommand."""
    parser = subparsers.add_parser("hierarchy", help="Show a category's place in the tree")
    parser.add_argument("categories", help="Category definitions CSV or s3:// URI")
    parser.add_argument("--category", required=True, help="Category name to inspect")
