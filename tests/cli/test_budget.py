"""Tests for readgate budget commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from readgate.cli.main import cli

runner = CliRunner()


def _invoke(root: Path, *args: str):
    return runner.invoke(cli, ["-C", str(root), "budget", *args])


class TestBudgetCommands:
    """budget init / record / increase / status / reset."""

    def test_given_no_budget_when_status_then_error(self, repo_root: Path) -> None:
        result = _invoke(repo_root, "status")
        assert result.exit_code == 1
        assert "readgate budget init" in result.output

    def test_given_session_when_reads_recorded_then_status_reports_usage(
        self, repo_root: Path
    ) -> None:
        # Given
        (repo_root / "a.ts").write_text("x" * 400)
        assert _invoke(repo_root, "init", "--limit", "1000").exit_code == 0

        # When
        record = _invoke(repo_root, "record", "a.ts", "--level", "signatures")
        result = _invoke(repo_root, "status", "--json")

        # Then
        assert record.exit_code == 0
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["consumed"] == 100
        assert data["budget"] == 1000
        assert data["percent_used"] == 10
        assert data["by_level"] == {"signatures": {"count": 1, "tokens": 100}}

    def test_given_session_when_increased_then_total_raised(self, repo_root: Path) -> None:
        # Given
        _invoke(repo_root, "init", "--limit", "1000")

        # When
        result = _invoke(repo_root, "increase", "500", "--reason", "Need parser")

        # Then
        assert result.exit_code == 0
        status = _invoke(repo_root, "status")
        assert "1,500" in status.output
        assert "Need parser" in status.output

    def test_given_negative_amount_when_increased_then_error(self, repo_root: Path) -> None:
        _invoke(repo_root, "init")
        result = _invoke(repo_root, "increase", "--reason", "x", "--", "-5")
        assert result.exit_code == 1
        assert "BUDGET_INVALID_AMOUNT" in result.output

    def test_given_zero_limit_when_init_then_error(self, repo_root: Path) -> None:
        result = _invoke(repo_root, "init", "--limit", "0")
        assert result.exit_code == 1

    def test_given_unknown_level_when_record_then_usage_error(self, repo_root: Path) -> None:
        result = _invoke(repo_root, "record", "a.ts", "--level", "everything")
        assert result.exit_code == 2

    def test_given_consumed_budget_when_reset_then_fresh_session(self, repo_root: Path) -> None:
        # Given
        _invoke(repo_root, "init", "--limit", "100")
        (repo_root / "a.ts").write_text("x" * 100)
        _invoke(repo_root, "record", "a.ts")

        # When
        result = _invoke(repo_root, "reset", "--limit", "200")

        # Then
        assert result.exit_code == 0
        data = json.loads(_invoke(repo_root, "status", "--json").output)
        assert data["consumed"] == 0
        assert data["budget"] == 200
