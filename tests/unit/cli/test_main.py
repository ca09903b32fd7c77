"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

from cli.main import main

_QUOTES = "tests/fixtures/quotes"
_ALIASES = "tests/fixtures/manufacturer_aliases.yaml"
_CATEGORIES = "tests/fixtures/categories/component_types.csv"


def test_cli_analyze_prints_run_counts(capsys) -> None:
    """CLI analyze should print record and observation counts."""
    exit_code = main(["--aliases", _ALIASES, "analyze", _QUOTES])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output[:3] == ["records=8", "dropped=4", "observations=7"]


def test_cli_analyze_prints_manifest_path(tmp_path: Path, capsys) -> None:
    """CLI analyze should print the manifest path when exporting."""
    exit_code = main(
        ["analyze", _QUOTES, "--categories", _CATEGORIES, "--output-dir", str(tmp_path)]
    )
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and Path(output).name == "manifest.json"


def test_cli_trends_prints_monthly_values(capsys) -> None:
    """CLI trends should print one weighted average per month."""
    exit_code = main(["--aliases", _ALIASES, "trends", _QUOTES])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output == ["2024-01\t5.0\t2", "2024-02\t10.0\t4", "2024-03\t12.0\t1"]


def test_cli_top_ranks_manufacturers(capsys) -> None:
    """CLI top should rank manufacturers meeting the data-point threshold."""
    exit_code = main(
        [
            "--aliases",
            _ALIASES,
            "top",
            _QUOTES,
            "--dimension",
            "manufacturer",
            "--min-data-points",
            "2",
        ]
    )
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert [line.split("\t")[0] for line in output] == ["Armstrong", "Greenheck", "Trane"]


def test_cli_hierarchy_prints_node_details(capsys) -> None:
    """CLI hierarchy should print the category's position in the tree."""
    exit_code = main(["hierarchy", _CATEGORIES, "--category", "Fan"])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert "parent=HVAC" in output
    assert "descendants=Centrifugal Fan" in output


def test_cli_suppliers_lists_manufacturers_for_category(capsys) -> None:
    """CLI suppliers should print every manufacturer quoting the category."""
    exit_code = main(["--aliases", _ALIASES, "suppliers", _QUOTES, "--category", "Chiller"])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output == ["Armstrong\t1\t10.0", "Trane\t1\t10.0"]
