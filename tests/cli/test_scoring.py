"""Tests for readgate locality, importance and risk commands."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from readgate.cli.main import cli

runner = CliRunner()


@pytest.fixture
def project(
    repo_root: Path, write_graph: Callable[[Path, dict[str, dict[str, Any]]], Path]
) -> Path:
    src = repo_root / "src"
    src.mkdir()
    (src / "auth.ts").write_text("const password = load();\nfetch('/login');\n")
    (src / "util.ts").write_text("export const x = 1;\n")
    write_graph(
        repo_root,
        {
            "src/auth.ts": {"imports": ["src/util.ts"]},
            "src/util.ts": {"importedBy": ["src/auth.ts"], "exports": ["x"]},
        },
    )
    return repo_root


class TestLocalityCommand:
    def test_given_single_file_when_scored_then_factor_breakdown(self, project: Path) -> None:
        # When
        result = runner.invoke(cli, ["-C", str(project), "locality", "src/auth.ts"])

        # Then
        assert result.exit_code == 0
        assert "Total score: 30/100" in result.output
        assert "Centrality:     5/25" in result.output

    def test_given_no_files_when_scored_then_graph_files_ranked(self, project: Path) -> None:
        # When
        result = runner.invoke(
            cli, ["-C", str(project), "locality", "--threshold", "0", "--json"]
        )

        # Then
        data = json.loads(result.output)
        assert {d["file_path"] for d in data} == {"src/auth.ts", "src/util.ts"}
        assert all(d["rank"] == 1 for d in data)


class TestImportanceCommands:
    def test_given_no_index_when_show_then_error(self, project: Path) -> None:
        result = runner.invoke(cli, ["-C", str(project), "importance", "show"])
        assert result.exit_code == 1
        assert "readgate importance build" in result.output

    def test_given_built_index_when_checked_then_rank_reported(self, project: Path) -> None:
        # Given
        build = runner.invoke(cli, ["-C", str(project), "importance", "build", "-k", "1"])
        assert build.exit_code == 0

        # When
        check = runner.invoke(cli, ["-C", str(project), "importance", "check", "src/auth.ts"])
        other = runner.invoke(cli, ["-C", str(project), "importance", "check", "src/util.ts"])
        show = runner.invoke(cli, ["-C", str(project), "importance", "show", "--json"])

        # Then
        assert "src/auth.ts: rank 1, importance 21, top-K: yes" in check.output
        assert "src/util.ts: rank 2, importance 12, top-K: no" in other.output
        data = json.loads(show.output)
        assert [d["filePath"] for d in data] == ["src/auth.ts", "src/util.ts"]


class TestRiskCommand:
    def test_given_single_file_when_assessed_then_detail(self, project: Path) -> None:
        # When
        result = runner.invoke(cli, ["-C", str(project), "risk", "src/auth.ts"])

        # Then
        assert result.exit_code == 0
        assert "Risk: src/auth.ts" in result.output
        assert "Level: medium (score 40/125)" in result.output

    def test_given_min_level_when_assessed_then_filtered(self, project: Path) -> None:
        result = runner.invoke(
            cli, ["-C", str(project), "risk", "--min-level", "low", "--json"]
        )
        data = json.loads(result.output)
        assert [d["file_path"] for d in data] == ["src/auth.ts"]
        assert data[0]["factors"]["security"] == 25
        assert data[0]["factors"]["external"] == 15
